import hmac


def verify_token(expected: str, token: str) -> bool:
    """
    Check the ``token`` request header against the configured API token.

    expected: Configured API token; an empty value disables the check
    token: Value of the 'token' header ('' when absent)
    """
    if not expected:
        return True
    if not token:
        return False

    # Constant-time comparison
    return hmac.compare_digest(expected.encode("utf-8"), token.encode("utf-8"))
