"""Failures raised by the collaborators the conversation core reads from.

These are distinct from "no match": the resolver never raises for an
unrecognised message, but a catalog or session store that cannot be read
is surfaced to the caller so it can choose between an apology reply and
a hard failure.
"""


class CollaboratorUnavailableError(Exception):
    """Raised when a backing collaborator cannot serve a lookup."""


class CatalogUnavailableError(CollaboratorUnavailableError):
    """Raised when the menu catalog cannot be loaded or queried."""


class SessionStoreUnavailableError(CollaboratorUnavailableError):
    """Raised when the customer session store cannot be read or written."""
