import pytest

from coach.domain.Plan import Meal
from coach.domain.Week import WeekIdentifier
from coach.logic.reconcile.mutations import PlanMutationReconciler, apply_regenerated_day, apply_swapped_meal
from coach.utilities.errors import EditGuardError, ReconciliationMismatchError
from coach.tests.factories import FakeMutationClient, clock, make_meal, make_plan, meal_payload


def _assert_untouched(before, after, skip_day):
    assert after.id == before.id
    assert after.week_start == before.week_start
    assert after.macros_target == before.macros_target
    assert after.notes == before.notes
    for old, new in zip(before.days, after.days):
        if old.day_index != skip_day:
            assert new is old


def test_apply_swapped_meal_is_pure():
    plan = make_plan()
    meal = make_meal("Grilled salmon")
    updated = apply_swapped_meal(plan, 2, 0, meal)
    assert updated.day(2).meals[0] is meal
    assert updated.day(2).meals[1] is plan.day(2).meals[1]
    assert plan.day(2).meals[0].title == "D2M0"
    _assert_untouched(plan, updated, skip_day=2)


def test_apply_regenerated_day_replaces_whole_list():
    plan = make_plan()
    meals = [make_meal("A"), make_meal("B")]
    updated = apply_regenerated_day(plan, 7, meals)
    assert [m.title for m in updated.day(7).meals] == ["A", "B"]
    _assert_untouched(plan, updated, skip_day=7)


def test_apply_on_missing_day_or_slot():
    plan = make_plan(day_indexes=range(1, 7))
    with pytest.raises(ReconciliationMismatchError):
        apply_swapped_meal(plan, 7, 0, make_meal("x"))
    with pytest.raises(ReconciliationMismatchError):
        apply_swapped_meal(plan, 1, 3, make_meal("x"))
    with pytest.raises(ReconciliationMismatchError):
        apply_regenerated_day(plan, 7, [])


@pytest.mark.asyncio
async def test_swap_meal_replaces_only_that_slot():
    plan = make_plan()
    client = FakeMutationClient(swap_answer={"planId": "plan-1", "dayIndex": 3, "mealIndex": 1,
                                             "meal": meal_payload("Salmon bowl")})
    updated = await PlanMutationReconciler(client, clock=clock).swap_meal(plan, 3, 1)

    assert client.calls == [("swap", "plan-1", 3, 1)]
    day = updated.day(3)
    assert day.meals[1].title == "Salmon bowl"
    assert day.meals[1] == Meal.from_dict(meal_payload("Salmon bowl"))
    assert day.meals[0] is plan.day(3).meals[0]
    assert day.meals[2] is plan.day(3).meals[2]
    _assert_untouched(plan, updated, skip_day=3)


@pytest.mark.asyncio
async def test_swap_uses_the_slot_the_backend_answered_for():
    plan = make_plan()
    client = FakeMutationClient(swap_answer={"planId": "plan-1", "dayIndex": 3, "mealIndex": 2,
                                             "meal": meal_payload("Tofu stir fry")})
    updated = await PlanMutationReconciler(client, clock=clock).swap_meal(plan, 3, 1)
    assert updated.day(3).meals[2].title == "Tofu stir fry"
    assert updated.day(3).meals[1] is plan.day(3).meals[1]


@pytest.mark.asyncio
async def test_regenerate_day_replaces_meal_list():
    plan = make_plan()
    answer = {"planId": "plan-1", "dayIndex": 5,
              "meals": [meal_payload("A"), None, meal_payload("B"), meal_payload("C"), meal_payload("D")]}
    client = FakeMutationClient(regenerate_answer=answer)
    updated = await PlanMutationReconciler(client, clock=clock).regenerate_day(plan, 5)

    assert client.calls == [("regenerate", "plan-1", 5)]
    assert [m.title for m in updated.day(5).meals] == ["A", "B", "C", "D"]
    _assert_untouched(plan, updated, skip_day=5)


@pytest.mark.asyncio
async def test_past_week_is_rejected_without_network_call():
    plan = make_plan(week=WeekIdentifier(2024, 5))
    client = FakeMutationClient(swap_answer={}, regenerate_answer={})
    reconciler = PlanMutationReconciler(client, clock=clock)
    with pytest.raises(EditGuardError):
        await reconciler.swap_meal(plan, 1, 0)
    with pytest.raises(EditGuardError):
        await reconciler.regenerate_day(plan, 1)
    assert client.calls == []


@pytest.mark.asyncio
async def test_missing_day_is_rejected_without_network_call():
    plan = make_plan(day_indexes=range(1, 7))
    client = FakeMutationClient(swap_answer={}, regenerate_answer={})
    with pytest.raises(ReconciliationMismatchError):
        await PlanMutationReconciler(client, clock=clock).regenerate_day(plan, 7)
    assert client.calls == []


@pytest.mark.asyncio
async def test_answer_for_unknown_day_is_a_mismatch():
    plan = make_plan(day_indexes=range(1, 7))
    client = FakeMutationClient(regenerate_answer={"planId": "plan-1", "dayIndex": 7, "meals": []})
    with pytest.raises(ReconciliationMismatchError):
        await PlanMutationReconciler(client, clock=clock).regenerate_day(plan, 6)
    assert len(client.calls) == 1


@pytest.mark.asyncio
async def test_answer_for_unknown_meal_slot_is_a_mismatch():
    plan = make_plan(meals_per_day=2)
    client = FakeMutationClient(swap_answer={"planId": "plan-1", "dayIndex": 1, "mealIndex": 4,
                                             "meal": meal_payload("x")})
    with pytest.raises(ReconciliationMismatchError):
        await PlanMutationReconciler(client, clock=clock).swap_meal(plan, 1, 1)


@pytest.mark.asyncio
async def test_answer_for_other_plan_is_a_mismatch():
    plan = make_plan()
    client = FakeMutationClient(swap_answer={"planId": "plan-2", "dayIndex": 1, "mealIndex": 0,
                                             "meal": meal_payload("x")})
    with pytest.raises(ReconciliationMismatchError):
        await PlanMutationReconciler(client, clock=clock).swap_meal(plan, 1, 0)
