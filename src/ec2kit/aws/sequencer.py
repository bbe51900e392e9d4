"""Pagination sequencing for EC2 list operations.

EC2 list APIs return one page per call together with a ``NextToken`` when
more results exist. A :class:`Sequencer` follows those tokens and flattens
every page into a single list, preserving page order.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Final, Generic, TypeVar

from ec2kit.aws.client import AWSClientWrapper

logger: Final = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")
ResponseT = TypeVar("ResponseT")
MarkerT = TypeVar("MarkerT")


class Sequencer(ABC, Generic[ItemT, ResponseT, MarkerT]):
    """Generic page-token follower.

    Subclasses describe how to fetch the first page, how to read the
    continuation marker from a page, how to fetch the page for a marker and
    how to extract the items of a page. :meth:`sequence` then drives the
    loop: fetch the first page, and while the latest page carries a marker,
    fetch the next one.

    There is no bound on the number of pages and no failure handling; an
    error on any page propagates and the pages collected so far are lost.
    """

    @abstractmethod
    async def get_initial(self) -> ResponseT:
        """Fetch the first page."""

    @abstractmethod
    def get_marker(self, response: ResponseT) -> MarkerT | None:
        """Return the continuation marker of a page, or None on the last page."""

    @abstractmethod
    async def get_from_marker(self, marker: MarkerT) -> ResponseT:
        """Fetch the page that follows ``marker``."""

    @abstractmethod
    def get_list(self, response: ResponseT) -> Sequence[ItemT]:
        """Extract the items of a page."""

    async def sequence(self) -> list[ItemT]:
        """Collect the items of every page, in page order.

        Returns:
            Items of all pages concatenated.
        """
        response = await self.get_initial()
        items = list(self.get_list(response))
        pages = 1

        marker = self.get_marker(response)
        while marker:
            response = await self.get_from_marker(marker)
            items.extend(self.get_list(response))
            pages += 1
            marker = self.get_marker(response)

        logger.debug(f"{type(self).__name__}: collected {len(items)} item(s) from {pages} page(s)")
        return items


class TokenSequencer(Sequencer[ItemT, dict[str, Any], str]):
    """Sequencer for EC2 operations paginated with ``NextToken``.

    The follow-up request is the base request plus ``NextToken``. Each raw
    item under ``result_key`` is passed through ``parse``.

    Example:
        >>> sequencer = TokenSequencer(
        ...     client,
        ...     "describe_tags",
        ...     "Tags",
        ...     TagDescription.from_response,
        ...     params={"Filters": [{"Name": "key", "Values": ["Name"]}]},
        ... )
        >>> tags = await sequencer.sequence()
    """

    def __init__(
        self,
        client: AWSClientWrapper,
        operation: str,
        result_key: str,
        parse: Callable[[dict[str, Any]], ItemT],
        params: Mapping[str, Any] | None = None,
    ) -> None:
        """Initialize the sequencer.

        Args:
            client: Client wrapper the pages are requested through.
            operation: boto3 operation name (e.g., 'describe_tags').
            result_key: Response key holding the page items (e.g., 'Tags').
            parse: Converts one raw item into the wrapper type.
            params: Base request parameters. Defaults to no parameters.
        """
        self.client = client
        self.operation = operation
        self.result_key = result_key
        self.parse = parse
        self.params: dict[str, Any] = dict(params or {})

    async def get_initial(self) -> dict[str, Any]:
        return await self.client.call(self.operation, **self.params)

    def get_marker(self, response: dict[str, Any]) -> str | None:
        return response.get("NextToken") or None

    async def get_from_marker(self, marker: str) -> dict[str, Any]:
        return await self.client.call(self.operation, **self.params, NextToken=marker)

    def get_list(self, response: dict[str, Any]) -> list[ItemT]:
        return [self.parse(item) for item in response.get(self.result_key, [])]
