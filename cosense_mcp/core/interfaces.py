"""Core interfaces (protocols) for cosense-mcp.

The mutation engine never talks to the wiki directly. It is handed an object
implementing PageStore and drives it; network transport, authentication and
the actual compare-and-swap live behind this protocol.
"""

from typing import Protocol

from cosense_mcp.core.types import CommitResult, Mutator


class PageStore(Protocol):
    """Protocol for the external content-and-transport collaborator.

    Example:
        class RemoteStore:
            async def fetch(self, project: str, title: str) -> list[str]:
                return await api.get_lines(project, title)

            async def commit(
                self, project: str, title: str, mutator: Mutator
            ) -> CommitResult:
                lines = await api.get_lines(project, title)
                ok = await api.put_if_unchanged(project, title, mutator(lines))
                return CommitResult(ok=ok)
    """

    async def fetch(self, project: str, title: str) -> list[str]:
        """Fetch the current lines of a page.

        Raises:
            PageNotFoundError: If the page does not exist.
            TransportFailure: On any other transport problem.
        """
        ...

    async def commit(self, project: str, title: str, mutator: Mutator) -> CommitResult:
        """Re-fetch a page, apply mutator to it and write the result.

        Exceptions raised by mutator propagate to the caller unchanged.

        Returns:
            CommitResult with ok=False if the write lost a race.
        """
        ...
