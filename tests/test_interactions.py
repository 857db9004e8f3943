from mediphant_server.interactions.rules import (
    NO_INTERACTION_REASON,
    check_interaction,
    find_interaction,
)


def test_known_pair_any_order_and_case():
    forward = find_interaction("Warfarin", "IBUPROFEN")
    reverse = find_interaction(" ibuprofen ", "warfarin")

    assert forward is not None
    assert forward == reverse
    assert forward.reason == "increased bleeding risk"


def test_multi_word_drug_name():
    result = check_interaction("contrast dye", "Metformin")

    assert result.is_potentially_risky is True
    assert result.advice == "hold metformin per imaging protocol"
    assert result.pair == ("contrast dye", "Metformin")


def test_unknown_pair():
    result = check_interaction("aspirin", "vitamin c")

    assert result.is_potentially_risky is False
    assert result.reason == NO_INTERACTION_REASON
    assert "consult with a healthcare professional" in result.advice


def test_same_drug_twice_is_not_a_rule_match():
    assert find_interaction("warfarin", "warfarin") is None
