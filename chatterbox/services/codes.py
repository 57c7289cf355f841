import secrets

LOGIN_CODE_LENGTH = 6
_LOWEST_CODE = 10 ** (LOGIN_CODE_LENGTH - 1)
_CODE_SPAN = 9 * _LOWEST_CODE


def generate_login_code() -> str:
    """Return a six digit code in [100000, 999999] drawn from the OS CSPRNG."""
    return str(_LOWEST_CODE + secrets.randbelow(_CODE_SPAN))
