import pytest

from jogo_empatia.services.game.rounds import (
    DEFAULT_ROUNDS,
    EmptySelection,
    InvalidTransition,
    RoundDefinition,
    RoundEngine,
    STAGE_COMPLETED,
    STAGE_IDLE,
    STAGE_ROUND_ACTIVE,
    STAGE_ROUND_SUMMARY,
    WordChoice,
)
from jogo_empatia.services.game.word_scores import WordScoreStore


def make_rounds():
    # Words 0, 1, 3 and 5 are empathetic in every round
    rounds = []
    for r in range(3):
        words = []
        for i in range(8):
            empathetic = i in (0, 1, 3, 5)
            words.append(WordChoice(f"r{r}w{i}", empathetic))
        rounds.append(RoundDefinition(words=tuple(words)))
    return rounds


@pytest.fixture()
def store(tmp_path):
    return WordScoreStore(str(tmp_path))


def tally(engine, text):
    return next(t for t in engine.tallies if t.text == text)


def test_default_rounds_shape():
    assert len(DEFAULT_ROUNDS) == 3
    assert all(len(r.words) == 8 for r in DEFAULT_ROUNDS)
    assert sum(w.is_empathetic for r in DEFAULT_ROUNDS for w in r.words) == 12


def test_start_game_resets_session(store):
    engine = RoundEngine(make_rounds(), store)
    assert engine.stage == STAGE_IDLE
    engine.start_game()
    assert engine.stage == STAGE_ROUND_ACTIVE
    assert engine.session.current_round_index == 0
    assert engine.total_score == 0
    assert [t.text for t in engine.tallies] == [f"r0w{i}" for i in range(8)]


def test_toggle_selection_flips_and_ignores_out_of_range(store):
    engine = RoundEngine(make_rounds(), store)
    engine.start_game()
    assert engine.toggle_selection(3)
    assert engine.session.selections == {3}
    assert engine.toggle_selection(3)
    assert engine.session.selections == set()
    assert engine.toggle_selection(8) is False
    assert engine.toggle_selection(-1) is False
    assert engine.session.selections == set()


def test_toggle_before_start_is_rejected(store):
    engine = RoundEngine(make_rounds(), store)
    with pytest.raises(InvalidTransition):
        engine.toggle_selection(0)


def test_confirm_scores_and_persists(store):
    engine = RoundEngine(make_rounds(), store)
    engine.start_game()
    engine.toggle_selection(0)
    engine.toggle_selection(2)
    outcome = engine.confirm_round()

    assert outcome.round_score == 1
    assert outcome.total_score == 1
    assert outcome.selected_words == ['r0w0', 'r0w2']
    assert engine.stage == STAGE_ROUND_SUMMARY
    assert tally(engine, 'r0w0').cumulative_points == 2
    assert tally(engine, 'r0w2').cumulative_points == 2
    assert tally(engine, 'r0w1').cumulative_points == 1

    saved = store.load(0, [f"r0w{i}" for i in range(8)])
    assert [t.cumulative_points for t in saved] == [2, 1, 2, 1, 1, 1, 1, 1]


def test_double_confirm_does_not_double_count(store):
    engine = RoundEngine(make_rounds(), store)
    engine.start_game()
    engine.toggle_selection(0)
    engine.confirm_round()
    with pytest.raises(InvalidTransition):
        engine.confirm_round()
    assert engine.total_score == 1
    assert tally(engine, 'r0w0').cumulative_points == 2


def test_double_confirm_guard_without_summary_step(store):
    engine = RoundEngine(make_rounds(), store, has_summary_continue_step=False)
    engine.start_game()
    engine.toggle_selection(0)
    engine.confirm_round()
    # Now in round 1 with nothing selected; the round 0 selection is gone
    assert engine.session.current_round_index == 1
    with pytest.raises(EmptySelection):
        engine.confirm_round()
    assert engine.total_score == 1


def test_minimum_selection_policy(store):
    strict = RoundEngine(make_rounds(), store)
    strict.start_game()
    with pytest.raises(EmptySelection):
        strict.confirm_round()
    assert strict.stage == STAGE_ROUND_ACTIVE

    lenient = RoundEngine(make_rounds(), store, require_minimum_selection=False)
    lenient.start_game()
    outcome = lenient.confirm_round()
    assert outcome.round_score == 0
    assert lenient.stage == STAGE_ROUND_SUMMARY


def test_continue_only_from_summary(store):
    engine = RoundEngine(make_rounds(), store)
    engine.start_game()
    with pytest.raises(InvalidTransition):
        engine.continue_round()
    engine.toggle_selection(1)
    engine.confirm_round()
    outcome = engine.continue_round()
    assert outcome.completed is False
    assert engine.stage == STAGE_ROUND_ACTIVE
    assert engine.session.current_round_index == 1
    assert engine.session.selections == set()


def test_full_game_with_summary_step(store):
    engine = RoundEngine(make_rounds(), store)
    engine.start_game()
    for _ in range(3):
        engine.toggle_selection(0)
        engine.toggle_selection(2)
        engine.toggle_selection(3)
        confirmed = engine.confirm_round()
        assert confirmed.completed is False
        outcome = engine.continue_round()
    assert outcome.completed is True
    assert outcome.total_score == 6
    assert engine.stage == STAGE_COMPLETED
    with pytest.raises(InvalidTransition):
        engine.toggle_selection(0)
    with pytest.raises(InvalidTransition):
        engine.confirm_round()


def test_full_game_without_summary_step(store):
    engine = RoundEngine(make_rounds(), store, has_summary_continue_step=False)
    engine.start_game()
    outcomes = []
    for _ in range(3):
        engine.toggle_selection(1)
        outcomes.append(engine.confirm_round())
    assert [o.completed for o in outcomes] == [False, False, True]
    assert outcomes[-1].round_index == 2
    assert engine.stage == STAGE_COMPLETED
    assert engine.total_score == 3


def test_tallies_accumulate_across_players(store):
    for _ in range(2):
        engine = RoundEngine(make_rounds(), store, has_summary_continue_step=False)
        engine.start_game()
        engine.toggle_selection(4)
        engine.confirm_round()
    assert store.load(0, ['r0w4'])[0].cumulative_points == 3


def test_restart_after_completion(store):
    engine = RoundEngine(make_rounds(), store, has_summary_continue_step=False)
    engine.start_game()
    for _ in range(3):
        engine.toggle_selection(0)
        engine.confirm_round()
    assert engine.total_score == 3
    engine.start_game()
    assert engine.total_score == 0
    assert engine.stage == STAGE_ROUND_ACTIVE


def test_without_store_uses_default_tallies():
    engine = RoundEngine(make_rounds(), store=None)
    engine.start_game()
    assert all(t.cumulative_points == 1 for t in engine.tallies)
    engine.toggle_selection(0)
    engine.confirm_round()
    assert tally(engine, 'r0w0').cumulative_points == 2


def test_state_snapshot(store):
    engine = RoundEngine(make_rounds(), store)
    engine.start_game()
    engine.toggle_selection(5)
    state = engine.state()
    assert state['stage'] == STAGE_ROUND_ACTIVE
    assert state['round_number'] == 1
    assert state['selection_count'] == 1
    assert state['can_confirm'] is True
    assert state['selected_words'] == ['r0w5']
    assert state['words'][5]['selected'] is True
    assert len(state['words']) == 8


def test_three_rounds_to_card_tap(store):
    from conftest import FakeSession
    from jogo_empatia.services.game.results import compute_skill_scores
    from jogo_empatia.services.nfc import RemoteSubmitter, ServerConfig

    engine = RoundEngine(make_rounds(), store, has_summary_continue_step=False)
    engine.start_game()
    engine.toggle_selection(0)
    engine.toggle_selection(2)
    first = engine.confirm_round()
    assert first.total_score == 1
    saved = store.load(0, [f"r0w{i}" for i in range(8)])
    assert saved[0].cumulative_points == 2
    assert saved[2].cumulative_points == 2

    for _ in range(2):
        engine.toggle_selection(0)
        engine.toggle_selection(2)
        outcome = engine.confirm_round()
    assert outcome.completed is True
    assert outcome.total_score == 3

    skills = compute_skill_scores(outcome.total_score)
    session = FakeSession()
    submitter = RemoteSubmitter(ServerConfig('10.0.0.5', '8080'), game_id=4, session=session)
    submitter.queue_submission(skills)
    submitter.on_external_identifier_received('CARD123')

    assert len(session.calls) == 1
    assert session.calls[0]['url'].endswith('/users/CARD123')
    assert session.calls[0]['json']['skill1'] == skills.empathy == 6


def test_toggle_rejects_bool_index(store):
    engine = RoundEngine(make_rounds(), store)
    engine.start_game()
    assert engine.toggle_selection(True) is False
    assert engine.toggle_selection(False) is False
    assert engine.session.selections == set()
