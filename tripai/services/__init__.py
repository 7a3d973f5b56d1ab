from .booking import BookingService, reward_points
from .catalog import CatalogService
from .identity import (
    AdminVerifier, ChainVerifier, CredentialVerifier, Identity, IdentityService,
    StoreVerifier, sanitize_user
)

__all__ = ['BookingService', 'reward_points', 'CatalogService', 'AdminVerifier',
           'ChainVerifier', 'CredentialVerifier', 'Identity', 'IdentityService',
           'StoreVerifier', 'sanitize_user']
