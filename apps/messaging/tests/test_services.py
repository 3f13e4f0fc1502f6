import itertools
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.core import mail
from django.db import DatabaseError, IntegrityError, transaction
from django.test import TestCase

from apps.core.exceptions import Conflict, Forbidden, NotFound, ValidationError
from apps.listings.models import Listing
from apps.messaging.models import Conversation, ConversationStatus, Message, SaleStatus
from apps.messaging.services import ConversationService
from apps.notifications.models import Notification, NotificationType

User = get_user_model()


def create_user(email, first_name="", last_name=""):
    return User.objects.create_user(
        email=email, password="testpass123", first_name=first_name, last_name=last_name
    )


def open_conversation(buyer, seller, listing):
    """Buyer contacts seller about listing and the seller accepts."""
    conversation, _, _ = ConversationService.initiate_conversation(
        buyer, receiver_id=seller.id, listing_id=listing.id if listing else None
    )
    return ConversationService.accept_conversation(seller, conversation.id)


class MessagingTestCase(TestCase):
    def setUp(self):
        self.seller = create_user("seller@campus.edu", "Sam", "Seller")
        self.buyer = create_user("buyer@campus.edu", "Ada", "Buyer")
        self.other = create_user("carl@campus.edu", "Carl", "Other")
        self.listing = Listing.objects.create(
            seller=self.seller,
            title="Calculus Textbook",
            description="8th edition",
            category="Books",
            price=Decimal("10.00"),
        )


class InitiateConversationTest(MessagingTestCase):
    def test_creates_pending_conversation_with_greeting(self):
        conversation, message, created = ConversationService.initiate_conversation(
            self.buyer, receiver_id=self.seller.id, listing_id=self.listing.id
        )

        self.assertTrue(created)
        self.assertEqual(conversation.status, ConversationStatus.PENDING)
        self.assertEqual(conversation.sale_status, SaleStatus.NONE)
        self.assertEqual(conversation.initiated_by, self.buyer)
        self.assertEqual(
            set(conversation.participants.all()), {self.buyer, self.seller}
        )
        self.assertEqual(message.sender, self.buyer)
        self.assertEqual(message.receiver, self.seller)
        self.assertEqual(
            message.content,
            "Hi! I'm interested in your listing. Is it still available?",
        )
        self.assertEqual(conversation.last_message_at, message.created_at)

    def test_reuses_existing_conversation(self):
        first, _, _ = ConversationService.initiate_conversation(
            self.buyer, receiver_id=self.seller.id, listing_id=self.listing.id
        )
        second, _, created = ConversationService.initiate_conversation(
            self.buyer, receiver_id=self.seller.id, listing_id=self.listing.id
        )

        self.assertFalse(created)
        self.assertEqual(first.id, second.id)
        self.assertEqual(Conversation.objects.count(), 1)
        self.assertEqual(Message.objects.filter(conversation=first).count(), 2)

    def test_conversation_without_listing_is_separate(self):
        with_listing, _, _ = ConversationService.initiate_conversation(
            self.buyer, receiver_id=self.seller.id, listing_id=self.listing.id
        )
        without_listing, _, created = ConversationService.initiate_conversation(
            self.buyer, receiver_id=self.seller.id
        )

        self.assertTrue(created)
        self.assertNotEqual(with_listing.id, without_listing.id)
        self.assertIsNone(without_listing.listing)

    def test_notifies_receiver_by_email(self):
        with self.captureOnCommitCallbacks(execute=True):
            ConversationService.initiate_conversation(
                self.buyer, receiver_id=self.seller.id, listing_id=self.listing.id
            )

        notification = Notification.objects.get(recipient=self.seller)
        self.assertEqual(notification.notification_type, NotificationType.NEW_CHAT_REQUEST)
        self.assertTrue(notification.is_sent)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, [self.seller.email])
        self.assertIn("Ada Buyer", mail.outbox[0].body)

    def test_missing_receiver(self):
        with self.assertRaises(ValidationError):
            ConversationService.initiate_conversation(self.buyer, receiver_id=None)

    def test_unknown_receiver(self):
        with self.assertRaises(NotFound):
            ConversationService.initiate_conversation(
                self.buyer, receiver_id="00000000-0000-0000-0000-000000000000"
            )

    def test_unknown_listing(self):
        with self.assertRaises(NotFound):
            ConversationService.initiate_conversation(
                self.buyer,
                receiver_id=self.seller.id,
                listing_id="00000000-0000-0000-0000-000000000000",
            )
        self.assertEqual(Conversation.objects.count(), 0)

    def test_cannot_message_yourself(self):
        with self.assertRaises(ValidationError):
            ConversationService.initiate_conversation(
                self.buyer, receiver_id=self.buyer.id
            )


class ConversationStateTest(MessagingTestCase):
    def setUp(self):
        super().setUp()
        self.conversation, _, _ = ConversationService.initiate_conversation(
            self.buyer, receiver_id=self.seller.id, listing_id=self.listing.id
        )

    def test_accept_is_idempotent(self):
        ConversationService.accept_conversation(self.seller, self.conversation.id)
        accepted = ConversationService.accept_conversation(
            self.seller, self.conversation.id
        )
        self.assertEqual(accepted.status, ConversationStatus.ACCEPTED)

    def test_non_participant_cannot_accept(self):
        with self.assertRaises(Forbidden):
            ConversationService.accept_conversation(self.other, self.conversation.id)

    def test_unknown_conversation(self):
        with self.assertRaises(NotFound):
            ConversationService.accept_conversation(
                self.seller, "00000000-0000-0000-0000-000000000000"
            )

    def test_blocked_conversation_cannot_be_accepted(self):
        ConversationService.block_conversation(self.seller, self.conversation.id)
        with self.assertRaises(Conflict):
            ConversationService.accept_conversation(self.buyer, self.conversation.id)

    def test_blocked_conversation_cannot_be_initiated_again(self):
        ConversationService.block_conversation(self.seller, self.conversation.id)
        messages = Message.objects.filter(conversation=self.conversation).count()
        notifications = Notification.objects.filter(recipient=self.seller).count()

        with self.assertRaises(Forbidden):
            ConversationService.initiate_conversation(
                self.buyer, receiver_id=self.seller.id, listing_id=self.listing.id
            )

        self.conversation.refresh_from_db()
        self.assertEqual(self.conversation.status, ConversationStatus.BLOCKED)
        self.assertEqual(
            Message.objects.filter(conversation=self.conversation).count(), messages
        )
        self.assertEqual(
            Notification.objects.filter(recipient=self.seller).count(), notifications
        )
        self.assertEqual(Conversation.objects.count(), 1)

    def test_rejected_conversation_cannot_be_accepted(self):
        Conversation.objects.filter(pk=self.conversation.pk).update(
            status=ConversationStatus.REJECTED
        )
        with self.assertRaises(Conflict):
            ConversationService.accept_conversation(self.seller, self.conversation.id)

    def test_rejected_conversations_are_hidden_from_list(self):
        ConversationService.initiate_conversation(self.other, receiver_id=self.seller.id)
        Conversation.objects.filter(pk=self.conversation.pk).update(
            status=ConversationStatus.REJECTED
        )

        conversations = list(ConversationService.get_conversations(self.seller))
        self.assertEqual(len(conversations), 1)
        self.assertNotEqual(conversations[0].pk, self.conversation.pk)

    def test_conversations_sorted_by_last_message(self):
        newer, _, _ = ConversationService.initiate_conversation(
            self.other, receiver_id=self.seller.id, listing_id=self.listing.id
        )
        ids = [c.id for c in ConversationService.get_conversations(self.seller)]
        self.assertEqual(ids, [newer.id, self.conversation.id])

        ConversationService.accept_conversation(self.seller, self.conversation.id)
        ConversationService.send_message(
            self.buyer, "still there?", conversation_id=self.conversation.id
        )
        ids = [c.id for c in ConversationService.get_conversations(self.seller)]
        self.assertEqual(ids, [self.conversation.id, newer.id])


class SendMessageTest(MessagingTestCase):
    def setUp(self):
        super().setUp()
        self.conversation, _, _ = ConversationService.initiate_conversation(
            self.buyer, receiver_id=self.seller.id, listing_id=self.listing.id
        )

    def test_forbidden_until_accepted_for_either_participant(self):
        for sender in (self.buyer, self.seller):
            with self.assertRaises(Forbidden):
                ConversationService.send_message(
                    sender, "hello", conversation_id=self.conversation.id
                )

    def test_forbidden_when_blocked(self):
        ConversationService.accept_conversation(self.seller, self.conversation.id)
        ConversationService.block_conversation(self.seller, self.conversation.id)
        with self.assertRaises(Forbidden):
            ConversationService.send_message(
                self.buyer, "hello", conversation_id=self.conversation.id
            )

    def test_non_participant_forbidden(self):
        ConversationService.accept_conversation(self.seller, self.conversation.id)
        with self.assertRaises(Forbidden):
            ConversationService.send_message(
                self.other, "hello", conversation_id=self.conversation.id
            )

    def test_send_by_receiver_finds_conversation(self):
        ConversationService.accept_conversation(self.seller, self.conversation.id)
        message = ConversationService.send_message(
            self.buyer,
            "is this available?",
            receiver_id=self.seller.id,
            listing_id=self.listing.id,
        )
        self.assertEqual(message.conversation_id, self.conversation.id)
        self.assertEqual(message.receiver, self.seller)
        self.assertEqual(message.listing, self.listing)

    def test_receiver_is_always_the_other_participant(self):
        ConversationService.accept_conversation(self.seller, self.conversation.id)
        message = ConversationService.send_message(
            self.seller, "yes", conversation_id=self.conversation.id
        )
        self.assertEqual(message.receiver, self.buyer)

    def test_unknown_listing_is_forbidden(self):
        ConversationService.accept_conversation(self.seller, self.conversation.id)
        with self.assertRaises(Forbidden):
            ConversationService.send_message(
                self.buyer,
                "hello",
                receiver_id=self.seller.id,
                listing_id="00000000-0000-0000-0000-000000000000",
            )
        self.assertEqual(Message.objects.filter(conversation=self.conversation).count(), 1)

    def test_blank_content(self):
        with self.assertRaises(ValidationError):
            ConversationService.send_message(
                self.buyer, "   ", conversation_id=self.conversation.id
            )

    def test_missing_target(self):
        with self.assertRaises(ValidationError):
            ConversationService.send_message(self.buyer, "hello")

    def test_history_in_both_directions_oldest_first(self):
        ConversationService.accept_conversation(self.seller, self.conversation.id)
        ConversationService.send_message(
            self.buyer, "is this available?", conversation_id=self.conversation.id
        )
        ConversationService.send_message(
            self.seller, "yes it is", conversation_id=self.conversation.id
        )

        history = list(ConversationService.get_messages(self.buyer, self.seller.id))
        self.assertEqual(
            [m.content for m in history][1:], ["is this available?", "yes it is"]
        )
        self.assertEqual(
            list(ConversationService.get_messages(self.seller, self.buyer.id)), history
        )


class SaleProtocolTest(MessagingTestCase):
    def setUp(self):
        super().setUp()
        self.conversation = open_conversation(self.buyer, self.seller, self.listing)

    def test_full_negotiation(self):
        ConversationService.send_message(
            self.buyer, "is this available?", conversation_id=self.conversation.id
        )
        conversation, request_message = ConversationService.initiate_sale(
            self.seller, self.conversation.id
        )
        self.assertEqual(conversation.sale_status, SaleStatus.PENDING_CONFIRMATION)
        self.assertIsNotNone(conversation.sale_requested_at)
        self.assertEqual(request_message.receiver, self.buyer)
        self.assertIn("Sam Seller", request_message.content)

        result = ConversationService.confirm_sale(self.buyer, self.conversation.id)
        self.listing.refresh_from_db()
        self.assertTrue(self.listing.is_sold)
        self.assertEqual(self.listing.buyer, self.buyer)
        self.assertEqual(result["conversation"].sale_status, SaleStatus.CONFIRMED)
        self.assertEqual(result["confirmation_message"].receiver, self.seller)
        self.assertEqual(result["rejected_conversations"], 0)

        rating = ConversationService.rate_seller(self.buyer, self.conversation.id, 5)
        self.assertEqual(rating, {"average_rating": 5.0, "num_reviews": 1})
        self.conversation.refresh_from_db()
        self.assertTrue(self.conversation.buyer_rated)

        with self.assertRaises(Conflict):
            ConversationService.rate_seller(self.buyer, self.conversation.id, 4)
        self.seller.refresh_from_db()
        self.assertEqual(self.seller.num_reviews, 1)

    def test_only_seller_can_initiate_sale(self):
        with self.assertRaises(Forbidden):
            ConversationService.initiate_sale(self.buyer, self.conversation.id)

    def test_initiate_sale_twice_on_sold_listing(self):
        ConversationService.initiate_sale(self.seller, self.conversation.id)
        ConversationService.confirm_sale(self.buyer, self.conversation.id)
        with self.assertRaises(Conflict):
            ConversationService.initiate_sale(self.seller, self.conversation.id)

    def test_initiate_sale_without_listing(self):
        conversation = open_conversation(self.other, self.seller, None)
        with self.assertRaises(ValidationError):
            ConversationService.initiate_sale(self.seller, conversation.id)

    def test_seller_cannot_confirm_own_sale(self):
        ConversationService.initiate_sale(self.seller, self.conversation.id)
        with self.assertRaises(Forbidden):
            ConversationService.confirm_sale(self.seller, self.conversation.id)
        self.listing.refresh_from_db()
        self.assertFalse(self.listing.is_sold)

    def test_confirm_without_request_is_invalid(self):
        with self.assertRaises(ValidationError) as ctx:
            ConversationService.confirm_sale(self.buyer, self.conversation.id)
        self.assertEqual(ctx.exception.detail[0], "No sale request pending")
        self.listing.refresh_from_db()
        self.assertFalse(self.listing.is_sold)

    def test_confirm_rejects_competing_conversations(self):
        competing = open_conversation(self.other, self.seller, self.listing)
        ConversationService.initiate_sale(self.seller, competing.id)
        ConversationService.initiate_sale(self.seller, self.conversation.id)

        with self.captureOnCommitCallbacks(execute=True):
            result = ConversationService.confirm_sale(self.buyer, self.conversation.id)

        self.assertEqual(result["rejected_conversations"], 1)
        competing.refresh_from_db()
        self.assertEqual(competing.status, ConversationStatus.REJECTED)
        self.assertEqual(competing.sale_status, SaleStatus.NONE)

        rejection = Message.objects.filter(conversation=competing).latest("created_at")
        self.assertEqual(rejection.sender, self.seller)
        self.assertEqual(rejection.receiver, self.other)
        self.assertIn("Calculus Textbook", rejection.content)

        notification = Notification.objects.get(
            recipient=self.other, notification_type=NotificationType.REQUEST_REJECTED
        )
        self.assertTrue(notification.is_sent)
        self.assertIn(self.other.email, [m.to[0] for m in mail.outbox])

        with self.assertRaises(ValidationError):
            ConversationService.confirm_sale(self.other, competing.id)

    def test_confirm_rejects_pending_and_skips_blocked_competitors(self):
        pending, _, _ = ConversationService.initiate_conversation(
            self.other, receiver_id=self.seller.id, listing_id=self.listing.id
        )
        fourth = create_user("dana@campus.edu", "Dana", "Fourth")
        blocked = open_conversation(fourth, self.seller, self.listing)
        ConversationService.block_conversation(self.seller, blocked.id)
        blocked_messages = Message.objects.filter(conversation=blocked).count()
        ConversationService.initiate_sale(self.seller, self.conversation.id)

        result = ConversationService.confirm_sale(self.buyer, self.conversation.id)

        self.assertEqual(result["rejected_conversations"], 1)
        pending.refresh_from_db()
        self.assertEqual(pending.status, ConversationStatus.REJECTED)
        self.assertEqual(pending.sale_status, SaleStatus.NONE)
        rejection = Message.objects.filter(conversation=pending).latest("created_at")
        self.assertEqual(rejection.sender, self.seller)
        self.assertEqual(rejection.receiver, self.other)

        blocked.refresh_from_db()
        self.assertEqual(blocked.status, ConversationStatus.BLOCKED)
        self.assertEqual(
            Message.objects.filter(conversation=blocked).count(), blocked_messages
        )

    def test_at_most_one_confirmed_sale_per_listing(self):
        ConversationService.initiate_sale(self.seller, self.conversation.id)
        ConversationService.confirm_sale(self.buyer, self.conversation.id)

        sneaky = Conversation.objects.create(listing=self.listing, initiated_by=self.other)
        sneaky.participants.add(self.other, self.seller)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Conversation.objects.filter(pk=sneaky.pk).update(
                    sale_status=SaleStatus.CONFIRMED
                )
        self.assertEqual(
            Conversation.objects.filter(
                listing=self.listing, sale_status=SaleStatus.CONFIRMED
            ).count(),
            1,
        )

    def test_failed_rejection_does_not_stop_the_others(self):
        stuck = open_conversation(self.other, self.seller, self.listing)
        fourth = create_user("dana@campus.edu", "Dana", "Fourth")
        rejected = open_conversation(fourth, self.seller, self.listing)
        ConversationService.initiate_sale(self.seller, self.conversation.id)

        create = Message.objects.create

        def flaky_create(**kwargs):
            if kwargs.get("receiver") == self.other:
                raise DatabaseError("disk full")
            return create(**kwargs)

        with mock.patch.object(Message.objects, "create", side_effect=flaky_create):
            result = ConversationService.confirm_sale(self.buyer, self.conversation.id)

        self.assertEqual(result["rejected_conversations"], 1)
        stuck.refresh_from_db()
        rejected.refresh_from_db()
        self.assertEqual(stuck.status, ConversationStatus.ACCEPTED)
        self.assertEqual(rejected.status, ConversationStatus.REJECTED)
        self.listing.refresh_from_db()
        self.assertTrue(self.listing.is_sold)

    def test_notification_failure_does_not_affect_sale(self):
        competing = open_conversation(self.other, self.seller, self.listing)
        ConversationService.initiate_sale(self.seller, self.conversation.id)

        with mock.patch(
            "apps.notifications.tasks.send_mail", side_effect=OSError("smtp down")
        ):
            with self.captureOnCommitCallbacks(execute=True):
                result = ConversationService.confirm_sale(
                    self.buyer, self.conversation.id
                )

        self.assertEqual(result["rejected_conversations"], 1)
        competing.refresh_from_db()
        self.assertEqual(competing.status, ConversationStatus.REJECTED)
        notification = Notification.objects.get(
            recipient=self.other, notification_type=NotificationType.REQUEST_REJECTED
        )
        self.assertFalse(notification.is_sent)
        self.assertEqual(notification.last_error, "smtp down")


class RateSellerTest(MessagingTestCase):
    def confirmed_conversation(self, buyer):
        listing = Listing.objects.create(
            seller=self.seller,
            title=f"Item for {buyer.email}",
            description="",
            category="Misc",
            price=Decimal("5.00"),
        )
        conversation = open_conversation(buyer, self.seller, listing)
        ConversationService.initiate_sale(self.seller, conversation.id)
        ConversationService.confirm_sale(buyer, conversation.id)
        return conversation

    def test_rating_before_confirmation_conflicts(self):
        conversation = open_conversation(self.buyer, self.seller, self.listing)
        with self.assertRaises(Conflict):
            ConversationService.rate_seller(self.buyer, conversation.id, 5)

    def test_seller_cannot_rate(self):
        conversation = self.confirmed_conversation(self.buyer)
        with self.assertRaises(Forbidden):
            ConversationService.rate_seller(self.seller, conversation.id, 5)

    def test_rating_out_of_range(self):
        conversation = self.confirmed_conversation(self.buyer)
        for rating in (0, 6, 4.5, True, "5"):
            with self.assertRaises(ValidationError):
                ConversationService.rate_seller(self.buyer, conversation.id, rating)

    def test_aggregate_is_order_independent(self):
        buyers = [
            self.buyer,
            self.other,
            create_user("dana@campus.edu", "Dana", "Fourth"),
        ]
        conversations = [self.confirmed_conversation(buyer) for buyer in buyers]

        for order in itertools.permutations([5, 3, 4]):
            User.objects.filter(pk=self.seller.pk).update(average_rating=0, num_reviews=0)
            Conversation.objects.filter(
                pk__in=[c.pk for c in conversations]
            ).update(buyer_rated=False)

            for buyer, conversation, rating in zip(buyers, conversations, order):
                result = ConversationService.rate_seller(buyer, conversation.id, rating)

            self.assertAlmostEqual(result["average_rating"], 4.0)
            self.assertEqual(result["num_reviews"], 3)
