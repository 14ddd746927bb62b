"""Activation workflow: provision a login identity for an accepted candidate.

Order of effects:
1. Validate the command and assess the temporary secret (weak secrets are
   reported as warnings, never rejected).
2. Under the candidate's record lock: check the candidate is accepted and
   not yet activated, provision the account (with retries), then persist
   account_link plus an account_activated audit entry as one new version.
3. Outside the lock: send the welcome message if requested. A delivery
   failure is reported in the result and never undoes the activation.

If provisioning fails nothing is written. If persisting fails after a
successful provision, the identity provider's per-candidate idempotency makes
a retried activation return the same login id.
"""

import logging
import secrets
import string
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

from talentops.core.config import settings
from talentops.core.errors import (
    AlreadyActivatedError,
    InvalidStateError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from talentops.providers.config import ProviderConfig
from talentops.providers.errors import ProviderError
from talentops.providers.identity.base import IdentityProvider
from talentops.providers.notification.base import NotificationProvider, WelcomePayload
from talentops.providers.retry import with_retries
from talentops.repositories.candidate_source import CandidateSource
from talentops.services.candidate_stage import CandidateStage
from talentops.services.candidate_types import AuditEntry, AuditKind, CandidateRecord
from talentops.services.record_locks import RecordLocks, get_record_locks

logger = logging.getLogger(__name__)

# Ambiguous characters (0/O, 1/l/I) are left out
_UPPER = "ABCDEFGHJKLMNPQRSTUVWXYZ"
_LOWER = "abcdefghjkmnpqrstuvwxyz"
_DIGITS = "23456789"
_SYMBOLS = "!@#$%"
SECRET_ALPHABET = _UPPER + _LOWER + _DIGITS + _SYMBOLS

DEFAULT_SECRET_LENGTH = 12


# =============================================================================
# Commands & Results
# =============================================================================


@dataclass(frozen=True)
class ActivationCommand:
    """Fields collected by the activation dialog.

    Attributes:
        temporary_secret: Initial password handed to the new employee.
        role: Role granted to the account (e.g. "Employee", "Manager").
        department: Optional department for the account.
        send_welcome: Whether to email the credentials.
    """

    temporary_secret: str
    role: str
    department: str | None = None
    send_welcome: bool = True


@dataclass(frozen=True)
class ActivationResult:
    """Outcome of a successful activation.

    welcome_sent is False with notification_error set when delivery failed
    (degraded success); both are unset when no welcome was requested.
    """

    candidate: CandidateRecord
    account_id: str
    email: str
    role: str
    department: str | None
    welcome_sent: bool
    notification_error: str | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        """Operator-facing summary line."""
        base = f"Account '{self.account_id}' created for {self.email}."
        if self.welcome_sent:
            return f"{base} Welcome email sent."
        if self.notification_error:
            return f"{base} Welcome email could not be sent; share credentials manually."
        return base


# =============================================================================
# Temporary Secrets
# =============================================================================


def generate_temporary_secret(length: int = DEFAULT_SECRET_LENGTH) -> str:
    """Generate a random temporary secret.

    The result always contains at least one uppercase letter, lowercase
    letter, digit and symbol.

    Args:
        length: Number of characters (at least 4).

    Returns:
        Secret drawn from SECRET_ALPHABET.

    Raises:
        ValueError: If length is below 4.
    """
    if length < 4:
        raise ValueError(f"Secret length must be at least 4, got {length}")
    chars = [secrets.choice(group) for group in (_UPPER, _LOWER, _DIGITS, _SYMBOLS)]
    chars.extend(secrets.choice(SECRET_ALPHABET) for _ in range(length - 4))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


def assess_temporary_secret(secret: str, min_length: int) -> list[str]:
    """List weaknesses of a temporary secret.

    Args:
        secret: Secret to check.
        min_length: Recommended minimum length.

    Returns:
        Warning messages; empty when the secret meets the policy.
    """
    warnings: list[str] = []
    if len(secret) < min_length:
        warnings.append(
            f"Temporary secret is shorter than the recommended {min_length} characters"
        )
    missing = [
        label
        for label, present in (
            ("an uppercase letter", any(c.isupper() for c in secret)),
            ("a lowercase letter", any(c.islower() for c in secret)),
            ("a digit", any(c in string.digits for c in secret)),
            ("a symbol", any(not c.isalnum() for c in secret)),
        )
        if not present
    ]
    if missing:
        warnings.append(f"Temporary secret is missing {', '.join(missing)}")
    return warnings


# =============================================================================
# Public API
# =============================================================================


def _validate(command: ActivationCommand) -> tuple[str, str | None]:
    errors: list[dict] = []
    if not command.temporary_secret or not command.temporary_secret.strip():
        errors.append({"field": "temporary_secret", "msg": "is required"})
    role = (command.role or "").strip()
    if not role:
        errors.append({"field": "role", "msg": "is required"})
    if errors:
        raise ValidationError("Activation request is incomplete", details=errors)
    department = (command.department or "").strip() or None
    return role, department


async def activate_candidate(
    candidate_id: uuid.UUID,
    command: ActivationCommand,
    *,
    source: CandidateSource,
    identity: IdentityProvider,
    notifier: NotificationProvider,
    locks: RecordLocks | None = None,
    config: ProviderConfig | None = None,
    min_secret_length: int | None = None,
) -> ActivationResult:
    """Provision a login identity for an accepted candidate.

    Args:
        candidate_id: Candidate to activate.
        command: Confirmed activation dialog fields.
        source: Candidate store.
        identity: Identity provisioning collaborator.
        notifier: Notification collaborator.
        locks: Per-candidate lock registry. Defaults to the process-wide one.
        config: Retry policy. Defaults to ProviderConfig().
        min_secret_length: Secret length below which a warning is reported.
            Defaults to settings.min_temporary_secret_length.

    Returns:
        ActivationResult with the updated candidate.

    Raises:
        ValidationError: Missing secret or role.
        NotFoundError: Unknown candidate.
        InvalidStateError: Candidate is not accepted.
        AlreadyActivatedError: Candidate already has an account.
        UpstreamError: Identity provisioning failed (PROVISION_FAILED).
        StaleRecordError: Another writer committed first.
        PersistError: The record could not be saved.
    """
    role, department = _validate(command)
    warnings = assess_temporary_secret(
        command.temporary_secret,
        min_secret_length
        if min_secret_length is not None
        else settings.min_temporary_secret_length,
    )
    retry_config = config if config is not None else ProviderConfig()
    record_locks = locks if locks is not None else get_record_locks()

    async with record_locks.hold(candidate_id):
        record = await source.get_candidate(candidate_id)
        if record is None:
            raise NotFoundError("Candidate", str(candidate_id))
        if record.stage != CandidateStage.ACCEPTED:
            raise InvalidStateError(
                "Only accepted candidates can be activated, "
                f"candidate is {record.stage.value}"
            )
        if record.account_link is not None:
            raise AlreadyActivatedError(str(candidate_id), record.account_link)

        try:
            login_id = await with_retries(
                lambda: identity.provision_account(
                    candidate_id, command.temporary_secret, role, department
                ),
                retry_config,
            )
        except ProviderError as e:
            logger.error(
                "Provisioning failed for candidate %s: %s", candidate_id, e
            )
            raise UpstreamError(
                "PROVISION_FAILED",
                "Could not create the employee account. Try again later.",
            ) from e

        note = f"Account activated: login '{login_id}', role {role}"
        if department:
            note = f"{note}, department {department}"
        entry = AuditEntry(
            kind=AuditKind.ACCOUNT_ACTIVATED,
            note=note,
            stage=record.stage,
            recorded_at=datetime.now(UTC),
        )
        updated = record.with_audit_entry(entry, account_link=login_id)
        await source.persist(updated)

    logger.info(
        "Candidate %s activated as %s (role=%s, warnings=%d)",
        candidate_id,
        login_id,
        role,
        len(warnings),
    )

    welcome_sent = False
    notification_error: str | None = None
    if command.send_welcome:
        payload = WelcomePayload(
            candidate_name=updated.contact.name,
            login_id=login_id,
            temporary_secret=command.temporary_secret,
            role=role,
            department=department,
        )
        try:
            await with_retries(
                lambda: notifier.send_welcome(updated.contact.email, payload),
                retry_config,
            )
            welcome_sent = True
        except ProviderError as e:
            notification_error = str(e) or type(e).__name__
            logger.warning(
                "Welcome message for candidate %s not delivered: %s",
                candidate_id,
                notification_error,
            )

    return ActivationResult(
        candidate=updated,
        account_id=login_id,
        email=updated.contact.email,
        role=role,
        department=department,
        welcome_sent=welcome_sent,
        notification_error=notification_error,
        warnings=warnings,
    )
