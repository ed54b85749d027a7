"""
In-memory коллабораторы пула (tests / dev)

- InMemoryTokenLedger: custody fungible-токенов, authorized mint/burn по Capability,
  хранилища (vault) по capability, учёт живых бакетов
- StaticPriceOracle: таблица цен (base, quote) → Decimal
- BadgeIdentity: credential = бакет user badge, user id = token id бейджа
"""

import logging
import secrets
import threading
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from src.core.domain.errors import InvalidAmount, Unauthorized
from src.core.domain.value import Bucket, Capability
from src.core.math.share_math import ZERO, add, sub, to_decimal

logger = logging.getLogger(__name__)


# =============================================================================
# TOKEN LEDGER
# =============================================================================


@dataclass
class TokenInfo:
    """Метаданные токена и его total issued."""

    token_id: str
    name: str
    symbol: str
    controller_key: str
    total_issued: Decimal = ZERO


class InMemoryTokenLedger:
    """
    Custody-коллаборатор в памяти.

    Контроллер токена фиксируется при create_token: только Capability с тем же
    key может mint/burn. Бакет можно потратить (burn/deposit/take) только один раз.
    """

    def __init__(self):
        self._tokens: Dict[str, TokenInfo] = {}
        self._live_buckets: Dict[str, Bucket] = {}
        self._vaults: Dict[Tuple[str, str], Decimal] = {}
        self._counter = 0
        self._lock = threading.RLock()

    # ----- Capabilities / tokens -----

    def issue_authority(self, holder: str) -> Capability:
        """Новая capability для holder (секретный key)."""
        return Capability(holder=holder, key=secrets.token_hex(16))

    def create_token(self, name: str, symbol: str, authority: Capability) -> str:
        with self._lock:
            self._counter += 1
            token_id = f"resource_{self._counter:04d}_{symbol.lower()}"
            self._tokens[token_id] = TokenInfo(
                token_id=token_id, name=name, symbol=symbol, controller_key=authority.key
            )
            logger.debug("Created token %s (%s) controlled by %s", token_id, name, authority.holder)
            return token_id

    def token_info(self, token_id: str) -> TokenInfo:
        try:
            return self._tokens[token_id]
        except KeyError:
            raise KeyError(f"Unknown token: {token_id}") from None

    def total_issued(self, token_id: str) -> Decimal:
        with self._lock:
            return self.token_info(token_id).total_issued

    # ----- Mint / burn -----

    def mint(self, token_id: str, amount: Decimal, authority: Capability) -> Bucket:
        with self._lock:
            info = self.token_info(token_id)
            self._require_controller(info, authority, "mint")
            amount = self._positive(amount)
            info.total_issued = add(info.total_issued, amount)
            return self._new_bucket(token_id, amount)

    def burn(self, bucket: Bucket, authority: Capability) -> None:
        with self._lock:
            info = self.token_info(bucket.token_id)
            self._require_controller(info, authority, "burn")
            self._consume(bucket)
            info.total_issued = sub(info.total_issued, bucket.amount)

    # ----- Vaults -----

    def deposit(self, bucket: Bucket, authority: Capability) -> None:
        with self._lock:
            self._consume(bucket)
            key = (authority.key, bucket.token_id)
            self._vaults[key] = add(self._vaults.get(key, ZERO), bucket.amount)

    def withdraw(self, token_id: str, amount: Decimal, authority: Capability) -> Bucket:
        with self._lock:
            amount = self._positive(amount)
            key = (authority.key, token_id)
            balance = self._vaults.get(key, ZERO)
            if amount > balance:
                raise InvalidAmount(
                    f"Vault of {authority.holder} holds {balance} of {token_id}, requested {amount}"
                )
            self._vaults[key] = sub(balance, amount)
            return self._new_bucket(token_id, amount)

    def vault_balance(self, token_id: str, authority: Capability) -> Decimal:
        with self._lock:
            return self._vaults.get((authority.key, token_id), ZERO)

    # ----- Buckets -----

    def take(self, bucket: Bucket, amount: Decimal) -> Tuple[Bucket, Optional[Bucket]]:
        """
        Разделение бакета: (taken, rest). rest = None, если забрано всё.

        Исходный бакет тратится.
        """
        with self._lock:
            amount = self._positive(amount)
            if amount > bucket.amount:
                raise InvalidAmount(f"Cannot take {amount} from bucket of {bucket.amount}")
            self._consume(bucket)
            taken = self._new_bucket(bucket.token_id, amount)
            rest_amount = sub(bucket.amount, amount)
            rest = self._new_bucket(bucket.token_id, rest_amount) if rest_amount > ZERO else None
            return taken, rest

    def is_live(self, bucket: Bucket) -> bool:
        return bucket.bucket_id in self._live_buckets

    # ----- Internals -----

    def _new_bucket(self, token_id: str, amount: Decimal) -> Bucket:
        bucket = Bucket(token_id=token_id, amount=amount)
        self._live_buckets[bucket.bucket_id] = bucket
        return bucket

    def _consume(self, bucket: Bucket) -> None:
        live = self._live_buckets.get(bucket.bucket_id)
        if live is None or live != bucket:
            raise InvalidAmount(f"Bucket {bucket.bucket_id} is not live (already spent or forged)")
        del self._live_buckets[bucket.bucket_id]

    @staticmethod
    def _require_controller(info: TokenInfo, authority: Capability, action: str) -> None:
        if authority.key != info.controller_key:
            raise Unauthorized(f"{authority.holder} is not allowed to {action} {info.token_id}")

    @staticmethod
    def _positive(amount: Decimal) -> Decimal:
        amount = to_decimal(amount)
        if amount <= ZERO:
            raise InvalidAmount(f"Amount must be positive, got {amount}")
        return amount


# =============================================================================
# PRICE ORACLE
# =============================================================================


class StaticPriceOracle:
    """Таблица цен. Отсутствующая пара → None."""

    def __init__(self, prices: Optional[Dict[Tuple[str, str], Decimal]] = None):
        self._prices: Dict[Tuple[str, str], Decimal] = dict(prices or {})

    def price_of(self, base_asset: str, quote_asset: str) -> Optional[Decimal]:
        return self._prices.get((base_asset, quote_asset))

    def update_price(self, base_asset: str, quote_asset: str, price: Decimal) -> None:
        self._prices[(base_asset, quote_asset)] = price

    def remove_price(self, base_asset: str, quote_asset: str) -> None:
        self._prices.pop((base_asset, quote_asset), None)


# =============================================================================
# IDENTITY
# =============================================================================


class BadgeIdentity:
    """
    Credential — бакет user badge, выданный SyntheticPoolEngine.new_user().

    Бейдж не валидируется как proof: user id = token id предъявленного бейджа.
    """

    def resolve_caller(self, credential: Any) -> str:
        if not isinstance(credential, Bucket):
            raise Unauthorized(f"Expected a user badge bucket, got {type(credential).__name__}")
        return credential.token_id
