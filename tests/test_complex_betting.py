import pytest

from pokerengine.betting import BettingRound
from pokerengine.inputs import ScriptedInput
from pokerengine.models import Action, ActionType

from .helpers import make_context, make_players, stake

CHECK_OPTIONS = [ActionType.CHECK, ActionType.RAISE, ActionType.FOLD]
CALL_OPTIONS = [ActionType.CALL, ActionType.RAISE, ActionType.FOLD]
ALL_IN_OPTIONS = [ActionType.ALL_IN, ActionType.FOLD]


def test_check_around_visits_each_player_once():
    script = ScriptedInput([ActionType.CHECK] * 3)
    ctx = make_context(make_players(100, 100, 100), script)

    BettingRound(ctx, raise_limit=10, phase=1, start_index=1).run()

    assert script.prompts == [("P1", CHECK_OPTIONS), ("P2", CHECK_OPTIONS), ("P0", CHECK_OPTIONS)]
    assert [turn.action.type for turn in ctx.pot.history] == [ActionType.CHECK] * 3
    assert all(turn.phase == 1 for turn in ctx.pot.history)


def test_single_raise_ends_when_control_returns_to_raiser():
    script = ScriptedInput(
        [ActionType.CHECK, ActionType.RAISE, ActionType.CALL, ActionType.CALL],
        raises=[5],
    )
    players = make_players(100, 100, 100)
    ctx = make_context(players, script)

    BettingRound(ctx, raise_limit=10, phase=2, start_index=0).run()

    assert script.prompts == [
        ("P0", CHECK_OPTIONS),
        ("P1", CHECK_OPTIONS),
        ("P2", CALL_OPTIONS),
        ("P0", CALL_OPTIONS),
    ]
    assert script.raise_limits == [10]
    assert ctx.pot.stakes() == {"p0": 5, "p1": 5, "p2": 5}
    assert [player.balance for player in players] == [95, 95, 95]


def test_re_raise_re_arms_the_circuit():
    script = ScriptedInput(
        [ActionType.RAISE, ActionType.RAISE, ActionType.CALL],
        raises=[10, 4],
    )
    ctx = make_context(make_players(100, 100), script)

    BettingRound(ctx, raise_limit=10, phase=1, start_index=0).run()

    assert [name for name, _ in script.prompts] == ["P0", "P1", "P0"]
    assert ctx.pot.get_call_amount() == 14
    assert ctx.pot.stakes() == {"p0": 14, "p1": 14}
    # raise amounts are totals for the round, not increments
    assert [turn.action.amount for turn in ctx.pot.history] == [10, 14, None]


def test_raise_limit_is_capped_by_balance():
    script = ScriptedInput([ActionType.RAISE, ActionType.RAISE, ActionType.FOLD], raises=[10, 2])
    ctx = make_context(make_players(100, 12), script)

    BettingRound(ctx, raise_limit=10, phase=1, start_index=0).run()

    # P1 owes 10 of their 12 chips, leaving at most 2 to raise with
    assert script.raise_limits == [10, 2]
    assert ctx.players[1].balance == 0
    assert ctx.pot.player_has_folded("p0")


def test_short_stack_is_offered_all_in_or_fold():
    script = ScriptedInput([ActionType.RAISE, ActionType.ALL_IN], raises=[10])
    players = make_players(100, 3)
    ctx = make_context(players, script)

    BettingRound(ctx, raise_limit=10, phase=1, start_index=0).run()

    assert script.prompts[1] == ("P1", ALL_IN_OPTIONS)
    assert ctx.pot.stakes() == {"p0": 10, "p1": 3}
    assert players[1].balance == 0
    # nobody left who could still change the pot
    assert len(script.prompts) == 2


def test_folds_end_the_circuit_early():
    script = ScriptedInput([ActionType.FOLD, ActionType.FOLD])
    ctx = make_context(make_players(50, 50, 50), script)

    BettingRound(ctx, raise_limit=5, phase=1, start_index=0).run()

    # P2 is the last player standing and is never asked
    assert [name for name, _ in script.prompts] == ["P0", "P1"]
    assert ctx.pot.number_of_players_folded() == 2

    script = ScriptedInput([ActionType.FOLD])
    ctx = make_context(make_players(50, 50), script)
    BettingRound(ctx, raise_limit=5, phase=1, start_index=0).run()
    assert len(script.prompts) == 1
    assert ctx.hand_over()


def test_blinds_give_the_big_blind_the_option():
    script = ScriptedInput([ActionType.CALL, ActionType.CALL, ActionType.CHECK])
    ctx = make_context(make_players(100, 100, 100), script)
    stake(ctx.pot, "p1", 1)
    stake(ctx.pot, "p2", 2)
    ctx.players[1].bet(1)
    ctx.players[2].bet(2)

    BettingRound(ctx, raise_limit=10, phase=2, start_index=0).run()

    assert script.prompts == [("P0", CALL_OPTIONS), ("P1", CALL_OPTIONS), ("P2", CHECK_OPTIONS)]
    assert ctx.pot.get_total_stake() == 6


def test_folded_and_broke_players_are_passed_through():
    script = ScriptedInput([ActionType.CHECK, ActionType.CHECK])
    ctx = make_context(make_players(100, 0, 100, 100), script)
    ctx.commit(3, Action(ActionType.FOLD))

    BettingRound(ctx, raise_limit=10, phase=1, start_index=0).run()

    assert [name for name, _ in script.prompts] == ["P0", "P2"]


def test_nobody_is_prompted_when_only_one_player_can_act():
    script = ScriptedInput()
    ctx = make_context(make_players(0, 100), script)

    BettingRound(ctx, raise_limit=10, phase=3, start_index=0).run()

    assert script.prompts == []
    assert ctx.pot.history == ()


def test_option_not_offered_is_rejected():
    script = ScriptedInput([ActionType.CALL])
    ctx = make_context(make_players(100, 100), script)

    with pytest.raises(ValueError, match="expected one of: CHECK, RAISE, FOLD"):
        BettingRound(ctx, raise_limit=10, phase=1, start_index=0).run()


def test_raise_outside_limit_is_rejected():
    script = ScriptedInput([ActionType.RAISE], raises=[11])
    ctx = make_context(make_players(100, 100), script)

    with pytest.raises(ValueError, match="outside 1-10"):
        BettingRound(ctx, raise_limit=10, phase=1, start_index=0).run()
    assert ctx.pot.history == ()


def test_turns_are_forwarded_to_the_recorder():
    script = ScriptedInput([ActionType.RAISE, ActionType.CALL], raises=[3])
    ctx = make_context(make_players(20, 20), script)

    BettingRound(ctx, raise_limit=10, phase=4, start_index=1).run()

    assert list(ctx.recorder.turns) == list(ctx.pot.history)
    assert [(turn.player_id, str(turn.action)) for turn in ctx.recorder.turns] == [("p1", "RAISE(3)"), ("p0", "CALL")]
