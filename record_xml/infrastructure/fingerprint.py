"""Payload fingerprinting with hashlib.

Implements HashingPort by streaming the record payload through a fixed set of
digests and storing the hex digests as record parameters.
"""

import hashlib
import logging
from typing import Mapping, Optional

from record_xml.domain.ports import HashingPort
from record_xml.domain.record import Record

logger = logging.getLogger(__name__)

# Parameter name -> hashlib algorithm
DEFAULT_ALGORITHMS: Mapping[str, str] = {
    "MD5": "md5",
    "SHA-1": "sha1",
    "SHA-256": "sha256",
}

_CHUNK_SIZE = 64 * 1024


class DigestFingerprinter(HashingPort):
    """Fingerprints record payloads with hashlib digests.

    Parameters:
        algorithms: Mapping of parameter name to hashlib algorithm name
        prefix: Optional prefix prepended to every parameter name
    """

    def __init__(self, algorithms: Optional[Mapping[str, str]] = None, prefix: str = ""):
        self.algorithms = dict(algorithms or DEFAULT_ALGORITHMS)
        self.prefix = prefix

        for algorithm in self.algorithms.values():
            if algorithm not in hashlib.algorithms_available:
                raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    def hash(self, record: Record) -> None:
        """Store payload digests on record; records without a payload are left untouched."""
        if record.channel_factory is None:
            logger.debug("Record has no payload, skipping fingerprinting")
            return

        digests = {name: hashlib.new(algorithm) for name, algorithm in self.algorithms.items()}
        try:
            with record.channel_factory.create() as channel:
                for chunk in iter(lambda: channel.read(_CHUNK_SIZE), b""):
                    for digest in digests.values():
                        digest.update(chunk)
        except OSError as e:
            logger.error(f"Could not read payload for fingerprinting: {e}", exc_info=True)
            return

        for name, digest in digests.items():
            record.put_parameter(f"{self.prefix}{name}", digest.hexdigest())
