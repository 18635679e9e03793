"""Tests for messages and the conversation transcript."""
import pytest
from pydantic import ValidationError

from function_inquiry.errors import ConversationOrderError
from function_inquiry.models import Conversation, Message, PendingCall


class TestMessage:
    def test_function_messages_need_a_name(self):
        with pytest.raises(ValidationError):
            Message(role="function", content="52.520008")

    def test_only_function_messages_carry_a_name(self):
        with pytest.raises(ValidationError):
            Message(role="user", content="hi", name="lookup_city_latitude")

    def test_unknown_role(self):
        with pytest.raises(ValidationError):
            Message(role="tool", content="hi")

    def test_messages_are_immutable(self):
        message = Message(role="user", content="hi")
        with pytest.raises(ValidationError):
            message.content = "bye"

    def test_openai_format_omits_missing_name(self):
        assert Message(role="user", content="hi").to_openai() == {"role": "user", "content": "hi"}
        assert Message(role="function", name="f", content="1").to_openai() == {
            "role": "function", "content": "1", "name": "f",
        }


class TestConversation:
    def test_reset_seeds_system_and_user(self):
        conversation = Conversation()
        conversation.reset("Only use the functions provided.", "Weather?")
        conversation.add_assistant("Sunny.")
        conversation.reset("Only use the functions provided.", "Again?")

        assert conversation.to_openai() == [
            {"role": "system", "content": "Only use the functions provided."},
            {"role": "user", "content": "Again?"},
        ]

    def test_function_result_follows_its_call(self):
        conversation = Conversation()
        conversation.reset("system", "question")
        conversation.expect_function_result("lookup_city_latitude")
        conversation.add_function_result("lookup_city_latitude", "52.520008")

        assert conversation.messages[-1] == Message(role="function", name="lookup_city_latitude", content="52.520008")

    def test_result_without_call_is_rejected(self):
        conversation = Conversation()
        conversation.reset("system", "question")
        with pytest.raises(ConversationOrderError):
            conversation.add_function_result("lookup_city_latitude", "52.520008")

    def test_two_results_for_one_call_are_rejected(self):
        conversation = Conversation()
        conversation.reset("system", "question")
        conversation.expect_function_result("lookup_city_latitude")
        conversation.add_function_result("lookup_city_latitude", "52.520008")
        with pytest.raises(ConversationOrderError):
            conversation.add_function_result("lookup_city_latitude", "52.520008")
        assert len(conversation) == 3

    def test_result_for_another_function_is_rejected(self):
        conversation = Conversation()
        conversation.reset("system", "question")
        conversation.expect_function_result("lookup_city_latitude")
        with pytest.raises(ConversationOrderError):
            conversation.add_function_result("lookup_city_longitude", "13.405")

    def test_pending_result_blocks_assistant_and_new_calls(self):
        conversation = Conversation()
        conversation.reset("system", "question")
        conversation.expect_function_result("lookup_city_latitude")
        with pytest.raises(ConversationOrderError):
            conversation.add_assistant("Sunny.")
        with pytest.raises(ConversationOrderError):
            conversation.expect_function_result("lookup_city_longitude")

    def test_appending_before_reset_is_rejected(self):
        with pytest.raises(ConversationOrderError):
            Conversation().add_assistant("Sunny.")

    def test_messages_snapshot_is_a_tuple(self):
        conversation = Conversation()
        conversation.reset("system", "question")
        snapshot = conversation.messages
        conversation.add_assistant("Sunny.")
        assert isinstance(snapshot, tuple)
        assert len(snapshot) == 2


def test_pending_call_str():
    call = PendingCall(name="lookup_weather_by_coordinate", arguments=["52.520008", "13.405"])
    assert str(call) == "lookup_weather_by_coordinate('52.520008', '13.405')"
