import logging
from typing import Dict, Optional, Tuple

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction
from django.db.models import Q
from django.utils import timezone

from apps.core.exceptions import Conflict, Forbidden, NotFound, ValidationError
from apps.core.utils.cache_manager import CacheManager
from apps.listings.models import Listing
from apps.messaging.models import (
    Conversation,
    ConversationStatus,
    Message,
    SaleStatus,
)
from apps.notifications.services.notification_service import NotificationService
from apps.users.models import CustomUser as User

logger = logging.getLogger("messaging_performance")

OPEN_STATUSES = [ConversationStatus.PENDING, ConversationStatus.ACCEPTED]


def _messaging_setting(name):
    return settings.MESSAGING_SETTINGS[name]


def _get_or_none(queryset, pk):
    """Fetch by primary key, treating malformed ids like missing rows."""
    if not pk:
        return None
    try:
        return queryset.filter(pk=pk).first()
    except (DjangoValidationError, ValueError):
        return None


class ConversationService:
    """
    The negotiation engine: conversations, messages and the
    initiate/confirm sale protocol.

    Every operation receives the acting user explicitly and raises one of
    ValidationError, NotFound, Forbidden or Conflict before touching state.
    """

    # ------------------------------------------------------------------
    # Capability checks
    # ------------------------------------------------------------------
    @staticmethod
    def is_participant(conversation: Conversation, user: User) -> bool:
        return conversation.participants.filter(pk=user.pk).exists()

    @staticmethod
    def is_seller(conversation: Conversation, actor: User) -> bool:
        """
        True when ``actor`` sells the conversation's listing. The seller is
        never stored on the conversation; it is always read from the listing.
        """
        listing = conversation.listing
        return listing is not None and listing.seller_id == actor.pk

    @staticmethod
    def other_participant(conversation: Conversation, user: User) -> Optional[User]:
        return conversation.participants.exclude(pk=user.pk).first()

    @staticmethod
    def get_conversation_for_participant(conversation_id, actor: User) -> Conversation:
        """Load a conversation, failing with NotFound or Forbidden."""
        conversation = _get_or_none(
            Conversation.objects.select_related("listing"), conversation_id
        )
        if conversation is None:
            raise NotFound("Conversation not found")
        if not ConversationService.is_participant(conversation, actor):
            raise Forbidden("Not a participant in this conversation")
        return conversation

    @staticmethod
    def _require_listing(conversation: Conversation) -> Listing:
        if conversation.listing_id is None:
            raise ValidationError("No listing in this conversation")
        if conversation.listing is None:
            raise NotFound("Listing not found")
        return conversation.listing

    @staticmethod
    def _find_conversation(user_a, user_b, listing: Optional[Listing]):
        """
        The conversation between exactly these two users about ``listing``.
        "No listing" is a key of its own.
        """
        return (
            Conversation.objects.filter(participants=user_a)
            .filter(participants=user_b)
            .filter(listing=listing)
            .order_by("created_at")
            .first()
        )

    # ------------------------------------------------------------------
    # Conversation lifecycle
    # ------------------------------------------------------------------
    @staticmethod
    def initiate_conversation(
        initiator: User, receiver_id, listing_id=None
    ) -> Tuple[Conversation, Message, bool]:
        """
        Find or open the conversation with ``receiver`` and post the greeting.

        Returns ``(conversation, greeting, created)``.
        """
        start_time = timezone.now()

        if not receiver_id:
            raise ValidationError({"receiver": ["Receiver required"]})

        receiver = _get_or_none(User.objects.all(), receiver_id)
        if receiver is None:
            raise NotFound("Receiver not found")
        if receiver.pk == initiator.pk:
            raise ValidationError("You cannot start a conversation with yourself")

        listing = None
        if listing_id:
            listing = _get_or_none(Listing.objects.all(), listing_id)
            if listing is None:
                raise NotFound("Listing not found")

        with transaction.atomic():
            conversation = ConversationService._find_conversation(
                initiator, receiver, listing
            )
            created = conversation is None
            if not created and conversation.status == ConversationStatus.BLOCKED:
                raise Forbidden("This conversation has been blocked")
            if created:
                conversation = Conversation.objects.create(
                    listing=listing,
                    status=ConversationStatus.PENDING,
                    initiated_by=initiator,
                )
                conversation.participants.add(initiator, receiver)

            message = Message.objects.create(
                conversation=conversation,
                sender=initiator,
                receiver=receiver,
                content=_messaging_setting("GREETING_TEMPLATE"),
                listing=listing,
            )
            conversation.last_message_at = message.created_at
            conversation.save(update_fields=["last_message_at", "updated_at"])

            NotificationService.notify_new_chat_request(
                receiver,
                initiator.display_name(_messaging_setting("DEFAULT_INITIATOR_NAME")),
            )

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(
            f"Conversation {conversation.id} initiated (created={created}) in {duration:.2f}ms"
        )
        return conversation, message, created

    @staticmethod
    def accept_conversation(actor: User, conversation_id) -> Conversation:
        """
        Open the conversation for messaging. Either participant may accept,
        and accepting twice is a no-op.
        """
        conversation = ConversationService.get_conversation_for_participant(
            conversation_id, actor
        )
        if conversation.status in [
            ConversationStatus.REJECTED,
            ConversationStatus.BLOCKED,
        ]:
            raise Conflict(f"Conversation is {conversation.status} and cannot be accepted")

        if conversation.status != ConversationStatus.ACCEPTED:
            conversation.status = ConversationStatus.ACCEPTED
            conversation.save(update_fields=["status", "updated_at"])
            logger.info(f"Conversation {conversation.id} accepted by {actor.id}")
        return conversation

    @staticmethod
    def block_conversation(actor: User, conversation_id) -> Conversation:
        conversation = ConversationService.get_conversation_for_participant(
            conversation_id, actor
        )
        if conversation.status == ConversationStatus.REJECTED:
            raise Conflict("Conversation is rejected and cannot be blocked")

        if conversation.status != ConversationStatus.BLOCKED:
            conversation.status = ConversationStatus.BLOCKED
            conversation.save(update_fields=["status", "updated_at"])
            logger.info(f"Conversation {conversation.id} blocked by {actor.id}")
        return conversation

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------
    @staticmethod
    def send_message(
        actor: User,
        content: str,
        receiver_id=None,
        conversation_id=None,
        listing_id=None,
    ) -> Message:
        """
        Append a message to an accepted conversation.

        An unknown listing, a missing conversation, a non-participant and a
        conversation not yet accepted all fail with Forbidden so existence is
        not disclosed.
        """
        start_time = timezone.now()

        if not receiver_id and not conversation_id:
            raise ValidationError("receiver or conversation required")
        if not content or not content.strip():
            raise ValidationError({"content": ["Message content cannot be empty"]})

        listing = None
        if listing_id:
            listing = _get_or_none(Listing.objects.all(), listing_id)
            if listing is None:
                raise Forbidden("Conversation not found")

        if conversation_id:
            conversation = _get_or_none(Conversation.objects.all(), conversation_id)
        else:
            receiver = _get_or_none(User.objects.all(), receiver_id)
            conversation = (
                ConversationService._find_conversation(actor, receiver, listing)
                if receiver is not None
                else None
            )

        if conversation is None:
            raise Forbidden("Conversation not found")
        if not ConversationService.is_participant(conversation, actor):
            raise Forbidden("Not a participant")
        if conversation.status != ConversationStatus.ACCEPTED:
            raise Forbidden("Conversation not accepted yet")

        with transaction.atomic():
            message = Message.objects.create(
                conversation=conversation,
                sender=actor,
                receiver=ConversationService.other_participant(conversation, actor),
                content=content,
                listing=listing or conversation.listing,
            )
            conversation.last_message_at = message.created_at
            conversation.save(update_fields=["last_message_at", "updated_at"])

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Message sent in conversation {conversation.id} in {duration:.2f}ms")
        return message

    @staticmethod
    def get_messages(actor: User, user_id, listing_id=None):
        """Messages exchanged with ``user_id`` in either direction, oldest first."""
        if not user_id:
            raise ValidationError({"user_id": ["This field is required."]})

        filters = Q(sender=actor, receiver_id=user_id) | Q(
            sender_id=user_id, receiver=actor
        )
        queryset = Message.objects.filter(filters)
        if listing_id:
            queryset = queryset.filter(listing_id=listing_id)
        return queryset.select_related("sender", "receiver").order_by("created_at", "id")

    @staticmethod
    def get_conversations(actor: User):
        """The actor's conversations, rejected ones hidden, most recent first."""
        return (
            Conversation.objects.filter(participants=actor)
            .exclude(status=ConversationStatus.REJECTED)
            .select_related("listing__seller", "initiated_by")
            .prefetch_related("participants")
            .order_by("-last_message_at")
        )

    # ------------------------------------------------------------------
    # Sale protocol
    # ------------------------------------------------------------------
    @staticmethod
    def initiate_sale(actor: User, conversation_id) -> Tuple[Conversation, Message]:
        """
        The seller asks the other participant to confirm the purchase.
        """
        start_time = timezone.now()

        conversation = ConversationService.get_conversation_for_participant(
            conversation_id, actor
        )
        listing = ConversationService._require_listing(conversation)

        if not ConversationService.is_seller(conversation, actor):
            raise Forbidden("Only the seller can initiate sale")
        if listing.is_sold:
            raise Conflict("Item is already sold")

        buyer = ConversationService.other_participant(conversation, actor)
        if buyer is None:
            raise ValidationError("Buyer not found")

        with transaction.atomic():
            now = timezone.now()
            message = Message.objects.create(
                conversation=conversation,
                sender=actor,
                receiver=buyer,
                content=_messaging_setting("SALE_REQUEST_TEMPLATE").format(
                    seller_name=actor.display_name(
                        _messaging_setting("DEFAULT_SELLER_NAME")
                    )
                ),
                listing=listing,
            )
            conversation.sale_status = SaleStatus.PENDING_CONFIRMATION
            conversation.sale_requested_at = now
            conversation.last_message_at = message.created_at
            conversation.save(
                update_fields=[
                    "sale_status",
                    "sale_requested_at",
                    "last_message_at",
                    "updated_at",
                ]
            )

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Sale requested in conversation {conversation.id} in {duration:.2f}ms")
        return conversation, message

    @staticmethod
    def confirm_sale(actor: User, conversation_id) -> Dict[str, object]:
        """
        The buyer confirms. In one transaction, with the listing row locked:
        mark the listing sold, confirm this conversation, reject every other
        open conversation on the listing and post the confirmation message.
        """
        start_time = timezone.now()

        conversation = ConversationService.get_conversation_for_participant(
            conversation_id, actor
        )
        ConversationService._require_listing(conversation)

        if ConversationService.is_seller(conversation, actor):
            raise Forbidden("Seller cannot confirm their own sale")

        with transaction.atomic():
            listing = Listing.objects.select_for_update().get(pk=conversation.listing_id)
            conversation = Conversation.objects.select_for_update().get(pk=conversation.pk)
            conversation.listing = listing

            if conversation.sale_status != SaleStatus.PENDING_CONFIRMATION:
                raise ValidationError("No sale request pending")
            if listing.is_sold:
                raise Conflict("Item is already sold")

            now = timezone.now()
            listing.is_sold = True
            listing.buyer = actor
            listing.save(update_fields=["is_sold", "buyer", "updated_at"])

            conversation.sale_status = SaleStatus.CONFIRMED
            conversation.sale_confirmed_at = now
            conversation.buyer_rated = False
            conversation.save(
                update_fields=[
                    "sale_status",
                    "sale_confirmed_at",
                    "buyer_rated",
                    "updated_at",
                ]
            )

            rejected_count = ConversationService.reject_competing_conversations(
                conversation
            )

            confirmation = Message.objects.create(
                conversation=conversation,
                sender=actor,
                receiver_id=listing.seller_id,
                content=_messaging_setting("SALE_CONFIRMED_TEMPLATE").format(
                    buyer_name=actor.display_name(
                        _messaging_setting("DEFAULT_BUYER_NAME")
                    )
                ),
                listing=listing,
            )
            conversation.last_message_at = confirmation.created_at
            conversation.save(update_fields=["last_message_at", "updated_at"])

            transaction.on_commit(
                lambda: ConversationService._invalidate_sale_caches(listing, actor)
            )

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(
            f"Sale confirmed for listing {listing.id} in conversation {conversation.id}, "
            f"{rejected_count} competing conversations rejected in {duration:.2f}ms"
        )
        return {
            "listing": listing,
            "conversation": conversation,
            "confirmation_message": confirmation,
            "rejected_conversations": rejected_count,
        }

    @staticmethod
    def reject_competing_conversations(conversation: Conversation) -> int:
        """
        Reject every other pending or accepted conversation on the listing of
        a confirmed sale. Idempotent: rejected threads are never touched again.

        Each conversation is handled in its own savepoint; a failure is
        logged and the remaining conversations are still processed.
        """
        listing = conversation.listing
        seller = listing.seller
        seller_name = seller.display_name(_messaging_setting("DEFAULT_SELLER_NAME"))
        content = _messaging_setting("SALE_REJECTED_TEMPLATE").format(
            listing_title=listing.title
        )

        competing = (
            Conversation.objects.filter(listing_id=listing.pk, status__in=OPEN_STATUSES)
            .exclude(pk=conversation.pk)
            .prefetch_related("participants")
        )

        rejected = 0
        for other in competing:
            buyer = next(
                (p for p in other.participants.all() if p.pk != listing.seller_id),
                None,
            )
            if buyer is None:
                logger.warning(f"Conversation {other.id} has no buyer side; skipped")
                continue

            try:
                with transaction.atomic():
                    message = Message.objects.create(
                        conversation=other,
                        sender=seller,
                        receiver=buyer,
                        content=content,
                        listing=listing,
                    )
                    other.status = ConversationStatus.REJECTED
                    other.sale_status = SaleStatus.NONE
                    other.last_message_at = message.created_at
                    other.save(
                        update_fields=[
                            "status",
                            "sale_status",
                            "last_message_at",
                            "updated_at",
                        ]
                    )
            except DatabaseError as exc:
                logger.error(
                    f"Failed to reject conversation {other.id} for listing {listing.id}: {exc}"
                )
                continue

            NotificationService.notify_request_rejected(buyer, listing.title, seller_name)
            rejected += 1
            logger.info(f"Rejected conversation {other.id} for buyer {buyer.email}")

        return rejected

    @staticmethod
    def _invalidate_sale_caches(listing: Listing, buyer: User) -> None:
        CacheManager.invalidate("listing", id=listing.pk)
        CacheManager.invalidate("listing_purchases", user_id=str(buyer.pk))

    # ------------------------------------------------------------------
    # Rating
    # ------------------------------------------------------------------
    @staticmethod
    def rate_seller(actor: User, conversation_id, rating) -> Dict[str, object]:
        """
        The buyer rates the seller once per confirmed sale. The seller row is
        locked for the running-mean update and ``buyer_rated`` is flipped
        with a conditional update, so a double submission cannot count twice.
        """
        min_rating = _messaging_setting("MIN_RATING")
        max_rating = _messaging_setting("MAX_RATING")
        if (
            isinstance(rating, bool)
            or not isinstance(rating, int)
            or not min_rating <= rating <= max_rating
        ):
            raise ValidationError(
                {"rating": [f"Rating {min_rating}-{max_rating} required"]}
            )

        conversation = ConversationService.get_conversation_for_participant(
            conversation_id, actor
        )
        listing = ConversationService._require_listing(conversation)

        if ConversationService.is_seller(conversation, actor):
            raise Forbidden("Only buyer can rate")
        if conversation.sale_status != SaleStatus.CONFIRMED:
            raise Conflict("Sale not confirmed")
        if conversation.buyer_rated:
            raise Conflict("Already rated")

        with transaction.atomic():
            claimed = Conversation.objects.filter(
                pk=conversation.pk,
                sale_status=SaleStatus.CONFIRMED,
                buyer_rated=False,
            ).update(buyer_rated=True, updated_at=timezone.now())
            if not claimed:
                raise Conflict("Already rated")

            seller = User.objects.select_for_update().get(pk=listing.seller_id)
            total = seller.average_rating * seller.num_reviews + rating
            seller.num_reviews += 1
            seller.average_rating = total / seller.num_reviews
            seller.save(update_fields=["average_rating", "num_reviews", "updated_at"])

        conversation.buyer_rated = True
        logger.info(
            f"Seller {seller.id} rated {rating} via conversation {conversation.id}; "
            f"average now {seller.average_rating:.2f} over {seller.num_reviews}"
        )
        return {
            "average_rating": seller.average_rating,
            "num_reviews": seller.num_reviews,
        }
