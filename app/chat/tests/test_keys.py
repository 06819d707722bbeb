"""Tests for conversation keying."""

import uuid

import pytest

from chat.keys import conversation_key, other_participant, participants


class TestConversationKey:
    def test_same_key_from_either_side(self):
        """
        Both participants compute the same key.

        Why it matters: A conversation is found by key alone; an
        order-dependent key would split it in two.
        """
        a, b = uuid.uuid4(), uuid.uuid4()

        assert conversation_key(a, b) == conversation_key(b, a)

    def test_key_is_sorted_ids_joined(self):
        assert conversation_key("u2", "u1") == "u1_u2"

    def test_uuid_and_string_forms_agree(self):
        user_id = uuid.uuid4()
        other = uuid.uuid4()

        assert conversation_key(user_id, other) == conversation_key(str(user_id), str(other))


class TestParticipants:
    def test_round_trip(self):
        assert participants(conversation_key("u1", "u2")) == ("u1", "u2")

    @pytest.mark.parametrize("key", ["", "u1", "u1_", "a_b_c"])
    def test_malformed_key(self, key):
        with pytest.raises(ValueError):
            participants(key)

    def test_other_participant(self):
        key = conversation_key("u1", "u2")

        assert other_participant(key, "u1") == "u2"
        assert other_participant(key, "u2") == "u1"

    def test_other_participant_rejects_outsider(self):
        with pytest.raises(ValueError):
            other_participant(conversation_key("u1", "u2"), "u3")
