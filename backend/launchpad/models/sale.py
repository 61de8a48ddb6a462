"""
Tortoise ORM models for the sale service.

These models track:
- Committed sale events (projects added, purchases, sell-outs) for history queries
- One-time owner and buyer login messages

The in-memory sale engine is the source of truth for allocations; the event
table is an append-only audit trail written after each successful call.
"""

from enum import Enum

from tortoise import fields, models


class SaleEventKind(str, Enum):
    """Kinds of persisted sale events."""
    PROJECT_ADDED = "project_added"
    TOKEN_BOUGHT = "token_bought"
    TOKEN_SOLD_OUT = "token_sold_out"


class SaleEvent(models.Model):
    """Committed sale event, in commit order."""
    id = fields.IntField(pk=True)
    # Engine instance that emitted the event; ids restart with every run
    run_id = fields.CharField(max_length=32, index=True)

    kind = fields.CharEnumField(SaleEventKind, max_length=20, index=True)
    project_id = fields.IntField(index=True)

    # Purchase details (empty for non-purchase events)
    buyer_wallet = fields.CharField(max_length=42, null=True, index=True)
    currency_address = fields.CharField(max_length=42, null=True)
    # Amounts can exceed 64 bits (18-decimal tokens), stored as decimal strings
    token_amount = fields.CharField(max_length=80, null=True)
    payment_amount = fields.CharField(max_length=80, null=True)

    project_name = fields.CharField(max_length=255, null=True)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "sale_events"
        ordering = ["id"]
        indexes = [
            ("project_id", "kind"),
            ("project_id", "buyer_wallet"),
        ]


class AuthPurpose(str, Enum):
    """What a signed login message authorizes."""
    ADMIN = "admin"
    PURCHASE = "purchase"


class AuthMessage(models.Model):
    """
    Login challenge for the owner or a buyer.

    The wallet signs the message; the message is deleted as soon as a
    signature for it has been accepted, so every write needs a fresh one.
    """
    id = fields.UUIDField(pk=True)
    wallet_address = fields.CharField(max_length=42, index=True)
    purpose = fields.CharEnumField(AuthPurpose, max_length=10)
    message = fields.TextField()
    expires_at = fields.BigIntField()  # unix timestamp
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "auth_messages"
        unique_together = (("wallet_address", "purpose"),)

