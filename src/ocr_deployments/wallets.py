"""Signing wallets for one network."""

from typing import Iterator, List, Sequence

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_keys.exceptions import ValidationError as KeyValidationError

from .exceptions import EmptySetError, IndexOutOfRangeError, KeyDecodeError

Wallet = LocalAccount


class WalletSet:
    """Ordered wallets with one marked as default."""

    def __init__(self, wallets: Sequence[Wallet], default_index: int = 0):
        self._wallets: List[Wallet] = list(wallets)
        self._default = 0
        if self._wallets:
            self._check_index(default_index)
            self._default = default_index

    @classmethod
    def build(cls, keys: Sequence[str]) -> "WalletSet":
        """
        Decode raw private keys into a wallet set.

        Surrounding whitespace is trimmed from each key. The first wallet
        becomes the default.

        Args:
            keys: Hex private keys, with or without 0x prefix

        Returns:
            WalletSet holding one wallet per key, in order

        Raises:
            KeyDecodeError: If any key fails to decode (no partial set is built)
        """
        wallets = []
        for position, raw_key in enumerate(keys):
            try:
                wallets.append(Account.from_key(raw_key.strip()))
            except (ValueError, TypeError, KeyValidationError) as e:
                # Never echo key material
                raise KeyDecodeError(f"Invalid private key at position {position}") from e
        return cls(wallets)

    def _check_index(self, i: int) -> None:
        if i < 0 or i >= len(self._wallets):
            raise IndexOutOfRangeError(
                f"Wallet index {i} out of range for {len(self._wallets)} wallets"
            )

    def default(self) -> Wallet:
        """
        Get the wallet used for transactions when none is specified.

        Raises:
            EmptySetError: If the set holds no wallets
        """
        if not self._wallets:
            raise EmptySetError("No wallets configured")
        return self._wallets[self._default]

    @property
    def default_index(self) -> int:
        return self._default

    def set_default(self, i: int) -> None:
        """
        Change the default wallet.

        Raises:
            IndexOutOfRangeError: If i is not a valid index (default unchanged)
        """
        self._check_index(i)
        self._default = i

    def wallet(self, i: int) -> Wallet:
        """
        Get a wallet by position.

        Raises:
            IndexOutOfRangeError: If i < 0 or i >= number of wallets
        """
        self._check_index(i)
        return self._wallets[i]

    def all(self) -> List[Wallet]:
        return list(self._wallets)

    def addresses(self) -> List[str]:
        """Checksummed addresses of all wallets, in order."""
        return [w.address for w in self._wallets]

    def __len__(self) -> int:
        return len(self._wallets)

    def __iter__(self) -> Iterator[Wallet]:
        return iter(self._wallets)
