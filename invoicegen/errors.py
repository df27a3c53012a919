"""Error kinds raised by the store and the renderers."""


class InvoiceGenError(Exception):
    pass


class PersistenceCorrupt(InvoiceGenError):
    """The stored blob could not be decoded. Readers treat it as empty."""


class PersistenceError(InvoiceGenError):
    """Writing to the local store failed."""


class RenderFailure(InvoiceGenError):
    """One output channel (pdf, image) could not be produced."""

    def __init__(self, channel: str, message: str):
        super().__init__(f"{channel} render failed: {message}")
        self.channel = channel
