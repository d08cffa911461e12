import json
import os
from typing import Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from spreadarb.shared.execution.errors import ErrorCode, FatalConfigError
from spreadarb.shared.system.logging import Logger


class WalletManager:
    """
    Keypair loading for the fee payer.
    Responsibility: one signing keypair, read-only after load.
    """

    def __init__(self, keypair: Keypair):
        self.keypair = keypair

    @property
    def pubkey(self) -> Pubkey:
        return self.keypair.pubkey()

    def get_public_key(self) -> str:
        return str(self.keypair.pubkey())

    @classmethod
    def load(
        cls,
        base58_key: Optional[str] = None,
        json_key: Optional[str] = None,
    ) -> "WalletManager":
        """
        Load from SOLANA_PRIVATE_KEY (base58) or PRIVATE_KEY (JSON byte array).

        Raises:
            FatalConfigError: no key configured or the key is malformed.
        """
        if base58_key is None:
            base58_key = os.getenv("SOLANA_PRIVATE_KEY", "")
        if json_key is None:
            json_key = os.getenv("PRIVATE_KEY", "")

        base58_key = base58_key.strip().strip("'\"")
        json_key = json_key.strip()

        if base58_key:
            try:
                keypair = Keypair.from_base58_string(base58_key)
            except Exception as e:
                raise FatalConfigError(f"Invalid Key Format: {e}", ErrorCode.WALLET_MISSING) from e
        elif json_key:
            try:
                keypair = Keypair.from_bytes(bytes(json.loads(json_key)))
            except Exception as e:
                raise FatalConfigError(f"Error parsing private key: {e}", ErrorCode.WALLET_MISSING) from e
        else:
            raise FatalConfigError("No wallet keypair provided in configuration", ErrorCode.WALLET_MISSING)

        wallet = cls(keypair)
        pk = wallet.get_public_key()
        Logger.info(f"[WALLET] Loaded wallet: {pk[:8]}...{pk[-4:]}")
        return wallet
