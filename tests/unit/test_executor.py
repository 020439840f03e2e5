"""Unit tests for plan execution."""

import asyncio

from game_deployments.executor import execute_plan, initialize_results
from game_deployments.planner import create_deployment_plan
from game_deployments.registry import DEFAULT_CONFIGS, build_registry
from game_deployments.types import ContractType, DeploymentStatus

Score = ContractType.SCORE
Match = ContractType.MATCH
Prize = ContractType.PRIZE
League = ContractType.LEAGUE
EventBus = ContractType.EVENT_BUS

EXISTING_SCORE = "0x" + "ab" * 20


def _run(fake_chain, requested, existing=None):
    plan = create_deployment_plan(requested, DEFAULT_CONFIGS)
    registry = build_registry(fake_chain.deploy_functions())
    return asyncio.run(execute_plan(plan, existing or {}, registry))


def _statuses(outcome):
    return {r.type: r.status for r in outcome.results}


class TestInitializeResults:
    """Test initial result states."""

    def test_existing_and_pending(self):
        """Test that verified types start ALREADY_EXISTS and others PENDING."""
        plan = create_deployment_plan([Score, Match], DEFAULT_CONFIGS)

        results = initialize_results(plan, {Score: EXISTING_SCORE})

        assert results[0].status is DeploymentStatus.ALREADY_EXISTS
        assert results[0].address == EXISTING_SCORE
        assert results[1].status is DeploymentStatus.PENDING
        assert results[1].depends_on == (Score,)


class TestExecutePlan:
    """Test the execute_plan function."""

    def test_deploys_in_order_with_dependency_addresses(self, fake_chain):
        """Test that Match is deployed after Score and receives its address."""
        outcome = _run(fake_chain, [Match, Score])

        assert fake_chain.deployed_types() == [Score, Match]
        score_address = outcome.deployed_addresses[Score]
        assert fake_chain.deploy_calls[1][1] == {"score_address": score_address}
        assert outcome.total_deployed == 2
        assert outcome.total_failed == 0
        assert outcome.deployed_in_batch == frozenset({Score, Match})

    def test_existing_dependency_address_is_used(self, fake_chain):
        """Test that an already-deployed Score feeds Match's params."""
        outcome = _run(fake_chain, [Score, Match], existing={Score: EXISTING_SCORE})

        assert fake_chain.deployed_types() == [Match]
        assert fake_chain.deploy_calls[0][1] == {"score_address": EXISTING_SCORE}
        assert outcome.total_existing == 1
        assert outcome.total_deployed == 1
        assert _statuses(outcome)[Score] is DeploymentStatus.ALREADY_EXISTS

    def test_all_existing_short_circuits(self, fake_chain):
        """Test that nothing is deployed when every type already exists."""
        outcome = _run(fake_chain, [Score], existing={Score: EXISTING_SCORE})

        assert outcome.all_existing
        assert fake_chain.deploy_calls == []
        assert outcome.deployed_in_batch == frozenset()

    def test_failure_cascades_to_dependents(self, fake_chain):
        """Test that a failed Score skips Match and Prize but not EventBus."""
        fake_chain.failing_types.add(Score)

        outcome = _run(fake_chain, [Score, Match, Prize, EventBus])
        statuses = _statuses(outcome)

        assert statuses[Score] is DeploymentStatus.FAILED
        assert statuses[Match] is DeploymentStatus.SKIPPED
        assert statuses[Prize] is DeploymentStatus.SKIPPED
        assert statuses[EventBus] is DeploymentStatus.SUCCESS
        assert outcome.total_failed == 1
        assert outcome.total_deployed == 1

    def test_skip_reason_names_missing_dependency(self, fake_chain):
        """Test the skip error message."""
        fake_chain.failing_types.add(Score)

        outcome = _run(fake_chain, [Score, Match])
        match_result = outcome.results[1]

        assert match_result.error == "Missing dependencies: Score"
        assert match_result.address is None

    def test_failure_records_error(self, fake_chain):
        """Test that the deploy exception message lands in the result."""
        fake_chain.failing_types.add(EventBus)

        outcome = _run(fake_chain, [EventBus])

        assert outcome.results[0].status is DeploymentStatus.FAILED
        assert "EventBus factory reverted" in outcome.results[0].error
        assert EventBus not in outcome.deployed_addresses

    def test_missing_deploy_function_fails_type(self, fake_chain):
        """Test that an unbound deploy function is a per-type failure."""
        plan = create_deployment_plan([EventBus, Score], DEFAULT_CONFIGS)
        registry = build_registry({Score: fake_chain.deploy_function(Score)})

        outcome = asyncio.run(execute_plan(plan, {}, registry))
        statuses = _statuses(outcome)

        assert statuses[EventBus] is DeploymentStatus.FAILED
        assert "No deploy function" in outcome.results[0].error
        assert statuses[Score] is DeploymentStatus.SUCCESS

    def test_dependency_outside_request_does_not_skip(self, fake_chain):
        """Test that League deploys even though Match was not requested."""
        outcome = _run(fake_chain, [League])

        assert _statuses(outcome)[League] is DeploymentStatus.SUCCESS
        assert fake_chain.deploy_calls[0][1] == {"match_address": None}
