"""
Region tracking for the DMARC feedback schema.

The aggregate report schema never nests a region inside itself, so
membership is kept as one boolean per region name rather than as an
element stack.
"""

from __future__ import annotations

REGIONS: tuple[str, ...] = (
    "feedback",
    "report_metadata",
    "policy_published",
    "record",
    "row",
    "policy_evaluated",
    "identifiers",
    "auth_results",
)

AUTH_METHODS: frozenset[str] = frozenset({"dkim", "spf"})


class ContextTracker:
    """Open/closed state of every schema region during one decode.

    Flags only change on start and end tags.  A region other than
    ``feedback`` is only opened while ``feedback`` itself is open;
    crossed or missing end tags simply leave flags set.
    """

    def __init__(self) -> None:
        self.feedback = False
        self.report_metadata = False
        self.policy_published = False
        self.record = False
        self.row = False
        self.policy_evaluated = False
        self.identifiers = False
        self.auth_results = False
        self.pending_auth_method: str | None = None

    def open(self, name: str) -> bool:
        """Mark region *name* as open.  Returns False for non-region names."""
        if name not in REGIONS:
            return False
        if name == "feedback" or self.feedback:
            setattr(self, name, True)
        return True

    def close(self, name: str) -> bool:
        """Mark region *name* as closed.  Returns False for non-region names."""
        if name not in REGIONS:
            return False
        setattr(self, name, False)
        if name == "auth_results":
            self.pending_auth_method = None
        return True

    def is_open(self, name: str) -> bool:
        return name in REGIONS and getattr(self, name)

    def remember_auth_method(self, name: str) -> None:
        """Record the authentication method whose ``result`` comes next."""
        if self.auth_results and name in AUTH_METHODS:
            self.pending_auth_method = name

    def forget_auth_method(self) -> None:
        self.pending_auth_method = None

    def open_regions(self) -> list[str]:
        """Names of every region currently open, in schema order."""
        return [name for name in REGIONS if getattr(self, name)]
