from __future__ import annotations

import pytest

from plzsync.models.locality import Locality, PostalCodeCandidate
from plzsync.state.events import (
    CandidateSelected,
    Direction,
    LocalityEdited,
    LocalityResolved,
    LookupFailed,
    LookupStarted,
    PostalCodeEdited,
    PostalCodeResolved,
    ResetRequested,
    SettledBlank,
)
from plzsync.state.store import FieldState, FieldStateStore, merge, transition

_MUNICH = (
    PostalCodeCandidate(postal_code="80331", name="München"),
    PostalCodeCandidate(postal_code="80333", name="München"),
)


def test_update_merges_over_previous_snapshot() -> None:
    store = FieldStateStore()
    store.set_locality("Berlin")
    store.set_error(Direction.POSTAL_CODE, "Invalid postal code")
    store.set_loading(Direction.LOCALITY, True)

    state = store.state
    assert state.locality == "Berlin"
    assert state.postal_code_error == "Invalid postal code"
    assert state.locality_loading is True
    assert state.postal_code == ""


def test_update_rejects_unknown_keys() -> None:
    with pytest.raises(ValueError, match="plz"):
        merge(FieldState(), plz="10115")


def test_snapshots_are_immutable() -> None:
    store = FieldStateStore()
    before = store.state
    store.set_postal_code("10115")

    assert before.postal_code == ""
    assert store.state is not before


def test_set_candidates_keeps_show_flag_consistent() -> None:
    store = FieldStateStore()
    store.set_candidates(_MUNICH)
    assert store.state.show_candidates is True

    store.set_candidates([])
    assert store.state.candidates == ()
    assert store.state.show_candidates is False


def test_set_single_candidate_resolves_postal_code() -> None:
    store = FieldStateStore()
    store.set_candidates([PostalCodeCandidate(postal_code="10115", name="Berlin")])

    assert store.state.postal_code == "10115"
    assert store.state.candidates == ()
    assert store.state.show_candidates is False


def test_listeners_receive_old_and_new_and_can_unsubscribe() -> None:
    store = FieldStateStore()
    seen: list[tuple[str, str]] = []
    unsubscribe = store.subscribe(lambda old, new: seen.append((old.locality, new.locality)))

    store.set_locality("Bonn")
    store.set_locality("Bonn")  # no change, no notification
    unsubscribe()
    store.set_locality("Köln")

    assert seen == [("", "Bonn")]


def test_reset_yields_initial_state_from_any_state() -> None:
    store = FieldStateStore(
        FieldState(
            locality="München",
            postal_code="80331",
            candidates=_MUNICH,
            show_candidates=True,
            locality_loading=True,
            postal_code_error="Invalid postal code",
        )
    )
    store.reset()
    assert store.state == FieldState()
    assert transition(store.state, ResetRequested()) == FieldState()


def test_locality_edit_clears_only_its_error() -> None:
    state = FieldState(locality_error="x", postal_code_error="y", candidates=_MUNICH, show_candidates=True)
    new = transition(state, LocalityEdited(value="Bonn"))

    assert new.locality == "Bonn"
    assert new.locality_error == ""
    assert new.postal_code_error == "y"
    assert new.candidates == _MUNICH


def test_postal_code_edit_supersedes_candidates() -> None:
    state = FieldState(postal_code_error="y", candidates=_MUNICH, show_candidates=True)
    new = transition(state, PostalCodeEdited(value="8"))

    assert new.postal_code == "8"
    assert new.postal_code_error == ""
    assert new.candidates == ()
    assert new.show_candidates is False


def test_candidate_selected_sets_postal_code() -> None:
    new = transition(FieldState(candidates=_MUNICH, show_candidates=True), CandidateSelected(postal_code="80333"))

    assert new.postal_code == "80333"
    assert new.candidates == ()
    assert new.show_candidates is False


def test_lookup_started_sets_one_loading_flag_and_clears_error() -> None:
    new = transition(FieldState(postal_code_error="Invalid postal code"), LookupStarted(direction=Direction.POSTAL_CODE))

    assert new.postal_code_loading is True
    assert new.locality_loading is False
    assert new.postal_code_error == ""
    assert new.postal_code_input_enabled is True
    assert new.locality_input_enabled is False


def test_locality_resolved_outcomes() -> None:
    loading = FieldState(locality="München", postal_code="1", locality_loading=True)

    none = transition(loading, LocalityResolved(query="München"))
    assert none.locality_error == "No postal codes found for this locality"
    assert none.locality_loading is False

    many = transition(
        loading,
        LocalityResolved(
            query="München",
            results=(
                Locality(postal_code="80331", name="München"),
                Locality(postal_code="80333", name="München"),
            ),
        ),
    )
    assert many.candidates == _MUNICH
    assert many.show_candidates is True
    assert many.postal_code == "1"

    one = transition(
        FieldState(locality="Berlin", locality_loading=True, candidates=_MUNICH, show_candidates=True),
        LocalityResolved(query="Berlin", results=(Locality(postal_code="10115", name="Berlin"),)),
    )
    assert one.postal_code == "10115"
    assert one.candidates == ()
    assert one.locality == "Berlin"


def test_postal_code_resolved_outcomes() -> None:
    loading = FieldState(locality="Hamburg", postal_code="99999", postal_code_loading=True)

    none = transition(loading, PostalCodeResolved(query="99999"))
    assert none.locality == ""
    assert none.postal_code_error == "Invalid postal code"
    assert none.postal_code_loading is False

    found = transition(
        loading,
        PostalCodeResolved(query="10115", results=(Locality(postal_code="10115", name="Berlin"),)),
    )
    assert found.locality == "Berlin"
    assert found.postal_code_error == ""


def test_lookup_failed_messages_per_direction() -> None:
    locality = transition(
        FieldState(locality_loading=True, candidates=_MUNICH, show_candidates=True),
        LookupFailed(direction=Direction.LOCALITY, reason="HTTP 500"),
    )
    assert locality.locality_error == "Error fetching postal codes. Please try again."
    assert locality.candidates == ()
    assert locality.locality_loading is False

    postal = transition(
        FieldState(postal_code_loading=True, locality="Berlin"),
        LookupFailed(direction=Direction.POSTAL_CODE),
    )
    assert postal.postal_code_error == "Error validating postal code. Please try again."
    assert postal.locality == "Berlin"
    assert postal.postal_code_loading is False


def test_settled_blank_clears_direction_state() -> None:
    state = FieldState(locality_error="x", postal_code_error="y", candidates=_MUNICH, show_candidates=True)

    locality = transition(state, SettledBlank(direction=Direction.LOCALITY))
    assert locality.locality_error == ""
    assert locality.candidates == ()
    assert locality.postal_code_error == "y"

    postal = transition(state, SettledBlank(direction=Direction.POSTAL_CODE))
    assert postal.postal_code_error == ""
    assert postal.candidates == _MUNICH


def test_validated_requires_both_fields_and_no_errors() -> None:
    assert FieldState(locality="Berlin", postal_code="10115").is_validated
    assert not FieldState(locality="Berlin").is_validated
    assert not FieldState(locality="Berlin", postal_code="10115", postal_code_error="x").is_validated
    assert FieldState(postal_code="1").has_input
    assert not FieldState().has_input


def test_update_with_candidates_keeps_show_flag_consistent() -> None:
    store = FieldStateStore()
    store.update(candidates=_MUNICH)
    assert store.state.show_candidates is True

    store.update(candidates=(PostalCodeCandidate(postal_code="10115", name="Berlin"),))
    assert store.state.candidates == ()
    assert store.state.show_candidates is False
    assert store.state.postal_code == "10115"


def test_update_rejects_show_flag_that_disagrees_with_candidates() -> None:
    store = FieldStateStore()
    with pytest.raises(ValueError, match="show_candidates"):
        store.update(show_candidates=True)
    with pytest.raises(ValueError, match="show_candidates"):
        store.update(candidates=_MUNICH, show_candidates=False)
    assert store.state == FieldState()


def test_field_state_rejects_inconsistent_candidates() -> None:
    with pytest.raises(ValueError):
        FieldState(candidates=_MUNICH, show_candidates=False)
    with pytest.raises(ValueError):
        FieldState(candidates=_MUNICH[:1], show_candidates=False)


def test_failing_listener_does_not_block_others(caplog: pytest.LogCaptureFixture) -> None:
    store = FieldStateStore()
    seen: list[str] = []

    def _broken(old: FieldState, new: FieldState) -> None:
        raise RuntimeError("render failed")

    store.subscribe(_broken)
    store.subscribe(lambda old, new: seen.append(new.locality))

    store.set_locality("Bonn")

    assert store.state.locality == "Bonn"
    assert seen == ["Bonn"]
    assert "State listener" in caplog.text
