import pytest

from chargefield import FieldConfig, FieldSession, InvalidInput, calculate_field_for


def test_update_recomputes_and_notifies():
    session = FieldSession(FieldConfig(field_density=3))
    seen = []
    session.subscribe(lambda gen, batch: seen.append((gen, len(batch))))

    batch = session.update(charge1_strength=2.0)
    assert session.config.charge1_strength == 2.0
    assert session.latest is batch
    assert seen == [(1, 27)]

    session.update(field_density=4)
    assert seen[-1] == (2, 64)


def test_unchanged_update_reuses_result():
    session = FieldSession(FieldConfig(field_density=3))
    seen = []
    session.subscribe(lambda gen, batch: seen.append(gen))
    first = session.update()
    second = session.update(charge1_strength=1.0)
    assert second is first
    assert seen == [1]


def test_stale_results_are_dropped():
    session = FieldSession(FieldConfig(field_density=2))
    seen = []
    session.subscribe(lambda gen, batch: seen.append(gen))

    old_gen, old_cfg = session.request(charge2_strength=-3.0)
    new_gen, new_cfg = session.request(charge2_strength=-4.0)
    assert not session.is_current(old_gen)

    assert session.deliver(new_gen, calculate_field_for(new_cfg)) is True
    assert session.deliver(old_gen, calculate_field_for(old_cfg)) is False
    assert seen == [new_gen]
    assert session.config.charge2_strength == -4.0


def test_invalid_update_leaves_session_untouched():
    session = FieldSession(FieldConfig(field_density=2))
    session.update()
    gen = session.generation
    with pytest.raises(InvalidInput):
        session.update(charge1_position=[0.0, float("nan"), 0.0])
    assert session.generation == gen
    assert session.config.charge1_position == (-2.0, 0.0, 0.0)


def test_unsubscribe_and_refresh():
    session = FieldSession(FieldConfig(field_density=2))
    seen = []
    unsubscribe = session.subscribe(lambda gen, batch: seen.append(gen))
    session.refresh()
    unsubscribe()
    session.refresh()
    assert seen == [1]
    assert session.generation == 2
