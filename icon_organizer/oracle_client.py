#!/usr/bin/env python3
"""
Naming oracle client: one batched inference call with bounded retries.
"""

from __future__ import annotations

# Standard Library
from dataclasses import dataclass, field
import logging
import sys
import time
from typing import Callable

# local repo modules
from .config import RETRY_ATTEMPTS, RETRY_BASE_DELAY
from .oracle_parsers import OracleResult, ParseError, match_results, parse_batch_response
from .oracle_prompts import OracleItem, build_batch_prompt
from .transports.base import OracleTransport

logger = logging.getLogger(__name__)

TRANSIENT_STATUS_CODES = (429, 503)

#============================================


class OracleError(RuntimeError):
	"""
	Base class for naming oracle failures.
	"""


class TransientOracleFailure(OracleError):
	"""
	Rate limited or temporarily unavailable; worth retrying.
	"""


class PermanentOracleFailure(OracleError):
	"""
	Any other failure, including an exhausted retry budget.
	"""


class SchemaMismatch(OracleError):
	"""
	A well-formed response lacked entries for some requested ids.
	"""

	def __init__(self, missing_ids: list[str], results: list[OracleResult]) -> None:
		super().__init__(f"Oracle response missing {len(missing_ids)} id(s): {missing_ids[:3]}")
		self.missing_ids = missing_ids
		self.results = results


#============================================


def _print_oracle(label: str) -> None:
	if sys.stdout.isatty():
		print(f"\033[36m[ORACLE]\033[0m {label}")
	else:
		print(f"[ORACLE] {label}")


def _status_code(exc: BaseException) -> int | None:
	for attr in ("code", "status", "status_code"):
		value = getattr(exc, attr, None)
		if isinstance(value, int):
			return value
	return None


def is_transient_error(exc: BaseException) -> bool:
	"""
	Detect rate-limit (429) and unavailable (503) errors from any transport.
	"""
	if isinstance(exc, TransientOracleFailure):
		return True
	if _status_code(exc) in TRANSIENT_STATUS_CODES:
		return True
	msg = str(exc)
	return any(str(code) in msg for code in TRANSIENT_STATUS_CODES)


#============================================


@dataclass(slots=True)
class RetryPolicy:
	"""
	Linear backoff: wait base_delay * n before retry n.

	Attributes:
		attempts: Retries allowed after the first call.
		base_delay: Seconds before the first retry.
		sleep: Injectable sleep for tests.
	"""
	attempts: int = RETRY_ATTEMPTS
	base_delay: float = RETRY_BASE_DELAY
	sleep: Callable[[float], None] = field(default=time.sleep)

	#============================================
	def delay_for(self, retry_number: int) -> float:
		return self.base_delay * retry_number

	#============================================
	def schedule(self) -> list[float]:
		return [self.delay_for(n) for n in range(1, self.attempts + 1)]


#============================================


class NamingOracleClient:
	"""
	Wraps a transport with the batch prompt, parsing and retry policy.
	"""

	def __init__(
		self,
		transport: OracleTransport,
		retry_policy: RetryPolicy | None = None,
		max_tokens: int = 8192,
	) -> None:
		self.transport = transport
		self.retry_policy = retry_policy or RetryPolicy()
		self.max_tokens = max_tokens

	#============================================
	def infer(self, items: list[OracleItem], *, strict: bool = False) -> list[OracleResult]:
		"""
		Label a chunk of filename stems in one call.

		Args:
			items: Chunk members as (id, stem).
			strict: Raise SchemaMismatch when an id is missing from the answer.

		Returns:
			At most one result per requested id, in response order.

		Raises:
			PermanentOracleFailure: non-retryable error or retries exhausted.
			SchemaMismatch: only when strict and ids are missing.
		"""
		if not items:
			return []
		prompt = build_batch_prompt(items)
		raw = self._generate_with_retry(prompt, len(items))
		try:
			parsed = parse_batch_response(raw)
		except ParseError as exc:
			excerpt = " ".join((exc.raw_text or raw).split())[:160]
			logger.warning("Unparseable oracle response: %s (excerpt: %s)", exc, excerpt)
			raise PermanentOracleFailure(str(exc)) from exc
		mapping, missing = match_results([item.id for item in items], parsed)
		results = list(mapping.values())
		if missing:
			logger.info("Oracle response missing %d of %d ids", len(missing), len(items))
			if strict:
				raise SchemaMismatch(missing, results)
		return results

	#============================================
	def _generate_with_retry(self, prompt: str, count: int) -> str:
		policy = self.retry_policy
		retry_number = 0
		purpose = f"labels for {count} filename(s)"
		while True:
			try:
				_print_oracle(f"asking {self.transport.name} for {purpose}")
				return self.transport.generate(prompt, purpose=purpose, max_tokens=self.max_tokens)
			except Exception as exc:
				if not is_transient_error(exc):
					logger.error("Oracle call failed: %s: %s", exc.__class__.__name__, exc)
					raise PermanentOracleFailure(f"{exc.__class__.__name__}: {exc}") from exc
				if retry_number >= policy.attempts:
					logger.error("Oracle still unavailable after %d retries", policy.attempts)
					raise PermanentOracleFailure(
						f"Retry budget exhausted after {policy.attempts} retries: {exc}"
					) from exc
				retry_number += 1
				delay = policy.delay_for(retry_number)
				logger.warning(
					"Hit rate limit. Retrying in %.1fs (%d retries left)",
					delay,
					policy.attempts - retry_number + 1,
				)
				policy.sleep(delay)
