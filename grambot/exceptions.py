"""Exception hierarchy for the grambot facade.

Runtime failures (transport errors, undecodable bodies, missing fields) are
returned as values, never raised.  Only misconfiguration detected while the
client is being built is an exception.
"""


class ConfigurationError(ValueError):
    """Raised at construction time for an unusable token or proxy setting.

    Attributes:
        setting: Name of the offending constructor argument.
    """

    def __init__(self, setting: str, reason: str) -> None:
        """Initialise with the setting name and a human-readable reason."""
        self.setting = setting
        self.reason = reason
        super().__init__(f"Invalid {setting}: {reason}")
