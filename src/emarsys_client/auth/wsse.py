"""WSSE UsernameToken signing for Emarsys API requests.

Every request carries an ``X-WSSE`` header built from the API user, a
password digest, a random nonce and the creation timestamp::

    UsernameToken Username="user",PasswordDigest="...",Nonce="...",Created="..."

The digest is ``base64(hex(sha1(nonce + created + secret)))``. Note that the
*hex string* is base64-encoded, not the raw SHA-1 bytes.

Nonces come from a seedable lagged Fibonacci generator rather than
``secrets``: it is reseeded from the clock on every call, so with a fixed
clock the whole header is reproducible, which is what the tests rely on.

See https://dev.emarsys.com/docs/emarsys-api/ZG9jOjI0ODk5NzAx-authentication
"""

import base64
import calendar
import hashlib
import logging
import random
import string
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from .rng import LaggedFibonacciSource

logger = logging.getLogger(__name__)

WSSE_HEADER = "X-WSSE"
NONCE_LENGTH = 36
NONCE_ALPHABET = string.ascii_lowercase + string.ascii_uppercase

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _as_utc(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def unix_nanos(now: datetime) -> int:
    """Return ``now`` as nanoseconds since the Unix epoch.

    Naive datetimes are treated as UTC.
    """
    now = _as_utc(now)
    return calendar.timegm(now.utctimetuple()) * 1_000_000_000 + now.microsecond * 1000


def format_created(now: datetime) -> str:
    """Format ``now`` as an RFC 3339 UTC timestamp with second precision."""
    return _as_utc(now).strftime("%Y-%m-%dT%H:%M:%SZ")


def generate_nonce(rng: LaggedFibonacciSource, length: int = NONCE_LENGTH) -> str:
    """Draw ``length`` letters from ``[a-zA-Z]``, one 63-bit value per letter."""
    size = len(NONCE_ALPHABET)
    return "".join(NONCE_ALPHABET[rng.int63() % size] for _ in range(length))


def password_digest(nonce: str, created: str, secret: str) -> str:
    """Compute the WSSE password digest.

    :param nonce: Request nonce
    :type nonce: str
    :param created: RFC 3339 creation timestamp
    :type created: str
    :param secret: Shared API secret
    :type secret: str
    :return: Base64 of the lowercase hex SHA-1 of nonce, created and secret
    :rtype: str
    """
    hashed = hashlib.sha1((nonce + created + secret).encode("utf-8")).hexdigest()
    return base64.b64encode(hashed.encode("ascii")).decode("ascii")


def format_wsse_header(username: str, digest: str, nonce: str, created: str) -> str:
    return (
        f'UsernameToken Username="{username}",PasswordDigest="{digest}",'
        f'Nonce="{nonce}",Created="{created}"'
    )


def generate_wsse(
    username: str,
    secret: str,
    now: datetime,
    rng: LaggedFibonacciSource,
    salt: int = 0,
) -> str:
    """Build a WSSE header value for a single request.

    ``rng`` is reseeded from ``now`` (xor ``salt``) first, so the result
    depends only on the arguments. The generator is mutated; do not share
    it between threads without a lock.

    :param username: API user name
    :type username: str
    :param secret: Shared API secret
    :type secret: str
    :param now: Creation instant
    :type now: datetime
    :param rng: Generator used for the nonce
    :type rng: LaggedFibonacciSource
    :param salt: Extra entropy mixed into the seed
    :type salt: int
    :return: Header value for ``X-WSSE``
    :rtype: str
    """
    rng.seed(unix_nanos(now) ^ salt)
    created = format_created(now)
    nonce = generate_nonce(rng)
    digest = password_digest(nonce, created, secret)
    return format_wsse_header(username, digest, nonce, created)


class WSSESigner:
    """Produce fresh ``X-WSSE`` header values for one API user.

    Every call signs with its own generator, seeded from the clock's
    nanoseconds. Unless the signer is deterministic, 64 bits drawn from a
    shared entropy source are mixed into that seed; the shared source is
    only touched under a lock, so concurrent calls never tear each other's
    state.

    :param username: API user name
    :type username: str
    :param secret: Shared API secret
    :type secret: str
    :param clock: Returns the current instant; defaults to UTC wall clock
    :type clock: Optional[Callable[[], datetime]]
    :param rand_source: Shared entropy source; defaults to one seeded from
                        the OS entropy pool
    :type rand_source: Optional[random.Random]
    :param deterministic: Seed from the clock alone, so equal instants give
                          equal headers
    :type deterministic: bool
    """

    def __init__(
        self,
        username: str,
        secret: str,
        clock: Optional[Clock] = None,
        rand_source: Optional[random.Random] = None,
        deterministic: bool = False,
    ):
        self.username = username
        self._secret = secret
        self._clock = clock or utc_now
        self._rand_source: Optional[random.Random] = None
        if not deterministic:
            self._rand_source = rand_source or random.Random(
                random.SystemRandom().getrandbits(64)
            )
        self._lock = threading.Lock()

    @classmethod
    def with_fixed_clock(cls, username: str, secret: str, clock: Clock) -> "WSSESigner":
        """Create a deterministic signer driven by ``clock``.

        Meant for tests: the header depends only on the credentials and the
        instant ``clock`` returns.
        """
        return cls(username, secret, clock=clock, deterministic=True)

    @property
    def deterministic(self) -> bool:
        return self._rand_source is None

    def sign(self) -> str:
        """Return a new header value; never reuse it across attempts."""
        now = self._clock()
        salt = 0
        if self._rand_source is not None:
            with self._lock:
                salt = self._rand_source.getrandbits(64)
        header = generate_wsse(
            self.username, self._secret, now, LaggedFibonacciSource(), salt=salt
        )
        logger.debug(f"Signed WSSE header for {self.username} at {format_created(now)}")
        return header
