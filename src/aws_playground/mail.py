"""Outbound mail message construction."""

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from email import errors, policy
from email.message import EmailMessage
from email.utils import formatdate

from aws_playground.errors import AddressError


def parse_address(value: str) -> tuple[str, str]:
    """Parse a single RFC 5322 mailbox.

    Accepts both ``user@example.com`` and ``Name <user@example.com>``.

    Returns:
        (display_name, addr_spec).

    Raises:
        AddressError: The value is empty, holds more than one address,
            or is not a valid address.
    """
    stripped = value.strip() if value else ""
    if not stripped:
        msg = f"parse address({value}): empty address"
        raise AddressError(msg)
    # The address-list grammar tolerates empty entries
    if stripped.startswith(",") or stripped.endswith(","):
        msg = f"parse address({value}): stray ','"
        raise AddressError(msg)

    try:
        header = policy.default.header_factory("To", value)
    except (ValueError, IndexError, errors.MessageError) as e:
        msg = f"parse address({value}): {e}"
        raise AddressError(msg) from e

    # Trailing garbage and unbalanced brackets only show up as defects
    if header.defects:
        msg = f"parse address({value}): {header.defects[0]}"
        raise AddressError(msg)
    group = header.groups[0] if len(header.groups) == 1 else None
    if group is None or group.display_name is not None or len(group.addresses) != 1:
        msg = f"parse address({value}): expected a single address"
        raise AddressError(msg)

    address = header.addresses[0]
    if not address.username or not address.domain:
        msg = f"parse address({value}): missing local part or domain"
        raise AddressError(msg)

    return address.display_name, address.addr_spec


def parse_addresses(values: Iterable[str]) -> list[str]:
    """Parse every value and return the bare addresses in input order."""
    return [parse_address(v)[1] for v in values]


def domain_of(address: str) -> str:
    """Domain part of a bare address (everything after the last ``@``)."""
    return address.rpartition("@")[2]


def generate_message_id(domain: str) -> str:
    """New ``<random@domain>`` Message-ID."""
    return f"<{uuid.uuid4()}@{domain}>"


@dataclass
class OutboundMessage:
    """A plain text mail ready to be sent as a raw message.

    Use ``build()`` to construct one; it validates every address first.
    ``to``/``cc``/``bcc`` keep the values as given (display names
    included) for the headers, while ``destinations`` holds the bare
    envelope addresses.
    """

    from_address: str
    message_id: str
    body: str
    subject: str = ""
    to: list[str] = field(default_factory=list)
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)
    destinations: list[str] = field(default_factory=list)

    @classmethod
    def build(
        cls,
        from_address: str,
        body: str,
        *,
        to: Iterable[str] = (),
        cc: Iterable[str] = (),
        bcc: Iterable[str] = (),
        subject: str = "",
        message_id: str = "",
    ) -> "OutboundMessage":
        _, from_spec = parse_address(from_address)
        to, cc, bcc = list(to), list(cc), list(bcc)

        destinations: list[str] = []
        for label, values in (("To", to), ("Cc", cc), ("Bcc", bcc)):
            try:
                destinations.extend(parse_addresses(values))
            except AddressError as e:
                msg = f"{label}: {e}"
                raise AddressError(msg) from e

        if not message_id:
            message_id = generate_message_id(domain_of(from_spec))

        return cls(
            from_address=from_address,
            message_id=message_id,
            body=body,
            subject=subject,
            to=to,
            cc=cc,
            bcc=bcc,
            destinations=destinations,
        )

    def to_mime(self) -> EmailMessage:
        """MIME representation. Bcc recipients never appear in headers."""
        msg = EmailMessage(policy=policy.default)
        msg["From"] = self.from_address
        if self.subject:
            msg["Subject"] = self.subject
        if self.to:
            msg["To"] = ", ".join(self.to)
        if self.cc:
            msg["Cc"] = ", ".join(self.cc)
        msg["Message-ID"] = self.message_id
        msg["Date"] = formatdate(localtime=True)
        msg.set_content(self.body, subtype="plain", charset="utf-8")
        return msg

    def as_bytes(self) -> bytes:
        """Serialized raw message with CRLF line endings."""
        return self.to_mime().as_bytes(policy=policy.SMTP)
