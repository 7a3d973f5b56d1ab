import re

from .errors import ValidationError

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def ensure_json_object(data):
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object.')
    return data


def missing_fields(data, fields):
    return [field for field in fields if is_blank(data.get(field))]


def is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def reject_unknown(data, allowed, ignored=()):
    unknown = sorted(set(data) - set(allowed) - set(ignored))
    if unknown:
        raise ValidationError(f"Unsupported fields: {', '.join(unknown)}")


def as_text(value, field, required=True):
    if value is None and not required:
        return None
    if not isinstance(value, str) or (required and not value.strip()):
        raise ValidationError(f'{field} must be a non-empty string.')
    return value.strip()


def as_number(value, field, positive=False, minimum=None):
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be a number.')
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValidationError(f'{field} must be a number.')
    if number != number or number in (float('inf'), float('-inf')):
        raise ValidationError(f'{field} must be a finite number.')
    if positive and number <= 0:
        raise ValidationError(f'{field} must be greater than zero.')
    if minimum is not None and number < minimum:
        raise ValidationError(f'{field} must be at least {minimum}.')
    return int(number) if number.is_integer() else number


def as_int(value, field, minimum=None):
    number = as_number(value, field, minimum=minimum)
    if not isinstance(number, int):
        raise ValidationError(f'{field} must be a whole number.')
    return number


def as_choice(value, field, choices):
    if value not in choices:
        raise ValidationError(f"{field} must be one of: {', '.join(choices)}")
    return value


def as_bool(value, field):
    if not isinstance(value, bool):
        raise ValidationError(f'{field} must be true or false.')
    return value


def as_string_list(value, field):
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError(f'{field} must be a list of strings.')
    return list(value)


def as_email(value, field='email'):
    email = as_text(value, field).lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError(f'{field} must be a valid email address.')
    return email
