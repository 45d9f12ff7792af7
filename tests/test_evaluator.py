import pytest

from pokerengine.cards import Rank, parse_cards
from pokerengine.evaluator import HandCategory, HandRank, compare_hands, group_ties, rank_hand


def test_rank_hand_identifies_all_hand_categories():
    cases = [
        (HandCategory.ROYAL_FLUSH, ["Ah", "Kh", "Qh", "Jh", "Th"]),
        (HandCategory.STRAIGHT_FLUSH, ["9c", "8c", "7c", "6c", "5c"]),
        (HandCategory.FOUR_OF_A_KIND, ["As", "Ah", "Ad", "Ac", "Kd"]),
        (HandCategory.FULL_HOUSE, ["Qc", "Qd", "Qs", "9h", "9s"]),
        (HandCategory.FLUSH, ["Ah", "Jh", "9h", "6h", "2h"]),
        (HandCategory.STRAIGHT, ["9h", "8d", "7c", "6s", "5h"]),
        (HandCategory.THREE_OF_A_KIND, ["8h", "8d", "8s", "Qd", "Js"]),
        (HandCategory.TWO_PAIR, ["7h", "7d", "4s", "4c", "As"]),
        (HandCategory.ONE_PAIR, ["6h", "6s", "Qh", "8d", "4c"]),
        (HandCategory.HIGH_CARD, ["As", "Kd", "Jh", "9c", "4d"]),
    ]

    for expected, labels in cases:
        assert rank_hand(parse_cards(labels)).category == expected, f"labels={labels}"


def test_reference_hands():
    assert rank_hand(parse_cards(["2h", "4d", "6c", "8s", "Jh"])) == HandRank(HandCategory.HIGH_CARD, (Rank.JACK,))
    assert rank_hand(parse_cards(["6s", "6d", "6c", "8h", "8s"])) == HandRank(
        HandCategory.FULL_HOUSE, (Rank.SIX, Rank.EIGHT)
    )
    assert rank_hand(parse_cards(["Ah", "Kh", "Qh", "Jh", "Th"])) == HandRank(HandCategory.ROYAL_FLUSH)


def test_wheel_straight_flush_is_not_royal():
    hand = rank_hand(parse_cards(["2h", "3h", "4h", "5h", "Ah"]))
    assert hand == HandRank(HandCategory.STRAIGHT_FLUSH, (Rank.FIVE,))
    assert str(hand) == "StraightFlush(Five)"


def test_wheel_straight_in_seven_cards():
    hand = rank_hand(parse_cards(["Ah", "2d", "3c", "4s", "5h", "9d", "Kd"]))
    assert hand == HandRank(HandCategory.STRAIGHT, (Rank.FIVE,))


def test_category_dominates_rank_payload():
    royal = HandRank(HandCategory.ROYAL_FLUSH)
    quads = HandRank(HandCategory.FOUR_OF_A_KIND, (Rank.SIX,))
    pair = HandRank(HandCategory.ONE_PAIR, (Rank.SIX,))
    high = HandRank(HandCategory.HIGH_CARD, (Rank.ACE,))

    assert royal > quads > pair
    assert pair > high
    assert HandRank(HandCategory.HIGH_CARD, (Rank.JACK,)) > HandRank(HandCategory.HIGH_CARD, (Rank.TEN,))


def test_seven_card_hands_prefer_the_higher_category():
    quads = rank_hand(parse_cards(["9h", "9d", "9s", "9c", "2h", "5h", "Kh"]))
    assert quads == HandRank(HandCategory.FOUR_OF_A_KIND, (Rank.NINE,))

    straight_flush = rank_hand(parse_cards(["9h", "8h", "7h", "6h", "5h", "Ah", "Kh"]))
    assert straight_flush == HandRank(HandCategory.STRAIGHT_FLUSH, (Rank.NINE,))

    double_trips = rank_hand(parse_cards(["7h", "7d", "7s", "Qc", "Qd", "Qh", "2s"]))
    assert double_trips == HandRank(HandCategory.FULL_HOUSE, (Rank.QUEEN, Rank.SEVEN))

    flush_over_straight = rank_hand(parse_cards(["4d", "5d", "6s", "7d", "8c", "Jd", "2d"]))
    assert flush_over_straight == HandRank(HandCategory.FLUSH, (Rank.JACK,))


def test_small_hands_rank_on_what_is_visible():
    assert rank_hand(parse_cards(["Kd"])) == HandRank(HandCategory.HIGH_CARD, (Rank.KING,))
    assert rank_hand(parse_cards(["3c", "3d"])).category == HandCategory.ONE_PAIR
    # four to a straight is not a straight
    assert rank_hand(parse_cards(["5c", "6d", "7h", "8s"])).category == HandCategory.HIGH_CARD


def test_rank_hand_rejects_bad_sizes():
    with pytest.raises(ValueError, match="empty"):
        rank_hand([])
    with pytest.raises(ValueError, match="at most 7"):
        rank_hand(parse_cards(["2c", "3c", "4c", "5c", "6c", "7c", "8c", "9c"]))


def test_compare_hands_and_kickers_tie():
    # kickers are not part of the value, so these are equal
    assert compare_hands(parse_cards(["Ah", "Ad", "Kc", "Qs", "9h"]), parse_cards(["As", "Ac", "2c", "3s", "7h"])) == 0
    assert compare_hands(parse_cards(["Kh", "Kd", "2c"]), parse_cards(["Ah", "Ad", "2d"])) == -1
    assert compare_hands(parse_cards(["9h", "8d", "7c", "6s", "5h"]), parse_cards(["Ah", "Ad", "Ac"])) == 1


def test_group_ties_orders_best_first_and_keeps_seat_order():
    full = HandRank(HandCategory.FULL_HOUSE, (Rank.SIX, Rank.EIGHT))
    pair = HandRank(HandCategory.ONE_PAIR, (Rank.TEN,))
    groups = group_ties([("c", pair), ("a", full), ("d", pair), ("b", full)])
    assert groups == [["a", "b"], ["c", "d"]]


def test_describe_uses_snake_case_names():
    assert rank_hand(parse_cards(["6s", "6d", "6c", "8h", "8s"])).describe() == "full_house"
    assert HandRank(HandCategory.HIGH_CARD, (Rank.TWO,)).describe() == "high_card"
