"""Cancellation support for page mutations."""


class CancellationToken:
    """Flag a caller sets to stop a mutation request between attempts.

    The retry loop and the dry run check the token before touching the page
    store. An attempt already handed to the store is allowed to finish.

    Example:
        token = CancellationToken()
        task = asyncio.create_task(
            engine.overwrite("Title", "Title\\nbody", cancel_token=token)
        )
        token.cancel()  # caller gave up; no further attempt starts
    """

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Request cancellation. Calling it again has no effect."""
        self._cancelled = True
