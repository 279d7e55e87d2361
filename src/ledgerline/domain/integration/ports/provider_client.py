"""Provider client port (interface)."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any


class ProviderClient(ABC):
    """
    Abstract interface to one provider's API for one connection.

    Implementations own transport, credentials and paging. The sync core
    only sees raw payload dicts and hands them to the provider's mapper.

    Responsibilities:
    - List the connection's accounts
    - List an account's transactions inside a date window

    Raises
    ------
    ProviderAuthenticationError
        When the provider rejects the connection's credentials
    ProviderRequestError
        For network failures and other provider-side errors
    """

    @abstractmethod
    async def list_accounts(self) -> list[dict[str, Any]]:
        """
        List raw account payloads.

        A payload may carry an embedded error marker for that one account
        inside an otherwise successful response.
        """

    @abstractmethod
    async def list_transactions(
        self,
        account_id: str,
        start_date: date,
        end_date: date,
    ) -> list[dict[str, Any]]:
        """
        List raw transaction payloads dated inside ``[start_date, end_date]``.

        Parameters
        ----------
        account_id
            The provider's account id
        start_date
            First day of the window (inclusive)
        end_date
            Last day of the window (inclusive)
        """

    async def close(self) -> None:  # noqa: B027
        """Release transport resources. Optional."""
