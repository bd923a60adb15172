"""Service settings for the Reviews domain.

Values come from the ``[custom]`` table of ``domain.toml``; anything missing
there falls back to the defaults below.
"""

from protean.utils.globals import current_domain

_DEFAULTS = {
    "REVIEWS_PAGE_SIZE": 10,
    "LOAD_MORE_PAGE_SIZE": 5,
    "MAX_PAGE_SIZE": 50,
    "MODERATOR_ROLES": ["admin", "moderator"],
    "OPERATIONS_MAILBOX": "reviews-ops@storefront.example",
    "EMAIL_ADAPTER": "fake",
    "EMAIL_FROM": "Storefront Reviews <reviews@storefront.example>",
    "SMTP_HOST": "localhost",
    "SMTP_PORT": 587,
    "DEDUPLICATE_HELPFUL_VOTES": False,
}


def get_setting(name: str, domain=None):
    """Return a setting from the active domain's ``[custom]`` config."""
    if name not in _DEFAULTS:
        raise KeyError(f"Unknown reviews setting: {name}")

    domain = domain or current_domain
    custom = domain.config.get("custom") or {}
    return custom.get(name, _DEFAULTS[name])
