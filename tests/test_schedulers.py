import pytest

from procsched.algorithms import (
    Policy,
    SchedulerConfig,
    _Run,
    compare_policies,
    run_algorithm,
    simulate,
)
from procsched.errors import InvalidQuantumError, SchedulerInvariantError
from procsched.models import Process
from procsched.workload_io import demo_workload


def _procs():
    return [
        Process("P1", arrival_time=0, burst_time=5, priority=2),
        Process("P2", arrival_time=1, burst_time=3, priority=1),
        Process("P3", arrival_time=2, burst_time=8, priority=3),
    ]


def _config(policy):
    return SchedulerConfig(quantum=2) if policy is Policy.ROUND_ROBIN else None


def _order(result):
    return [s.pid for s in result.timeline]


def test_fcfs_order():
    res = simulate(Policy.FCFS, _procs())
    assert _order(res) == ["P1", "P2", "P3"]
    assert res.process("P1").waiting_time == 0
    assert res.process("P2").waiting_time == 4
    assert res.process("P3").waiting_time == 6


def test_fcfs_scenario_two_processes():
    res = simulate(Policy.FCFS, [Process("1", 0, 10), Process("2", 1, 5)])
    p1, p2 = res.process("1"), res.process("2")
    assert (p1.response_time, p1.completion_time) == (0, 10)
    assert (p2.response_time, p2.completion_time) == (9, 15)


def test_fcfs_idle_gap_jumps_clock():
    res = simulate(Policy.FCFS, [Process("A", 0, 2), Process("B", 5, 3)])
    assert res.process("B").start_time == 5
    assert res.process("B").completion_time == 8
    assert res.metrics.cpu_busy_time == 5
    assert res.metrics.cpu_utilization == pytest.approx(5 / 8)


def test_fcfs_equal_arrivals_keep_input_order():
    procs = [Process("B", 0, 1), Process("A", 0, 1), Process("C", 0, 1)]
    assert _order(simulate(Policy.FCFS, procs)) == ["B", "A", "C"]


def test_fcfs_is_deterministic():
    first = simulate(Policy.FCFS, _procs())
    second = simulate(Policy.FCFS, _procs())
    assert first.processes == second.processes
    assert first.timeline == second.timeline


def test_sjf_order():
    res = simulate(Policy.SJF, _procs())
    # P1 is alone at t=0, then P2 (3) beats P3 (8)
    assert _order(res) == ["P1", "P2", "P3"]


def test_sjf_picks_shortest_ready_job():
    procs = [
        Process("A", 0, 6),
        Process("B", 1, 8),
        Process("C", 2, 2),
        Process("D", 3, 4),
    ]
    res = simulate(Policy.SJF, procs)
    assert _order(res) == ["A", "C", "D", "B"]
    assert res.process("B").completion_time == 20


def test_sjf_tie_goes_to_earlier_arrival():
    procs = [Process("A", 0, 4), Process("B", 2, 3), Process("C", 1, 3)]
    assert _order(simulate(Policy.SJF, procs)) == ["A", "C", "B"]


def test_srtf_preempts_longer_job():
    procs = [Process("1", 0, 10), Process("2", 1, 5), Process("3", 3, 8)]
    res = simulate(Policy.SRTF, procs)
    assert [(s.pid, s.start_time, s.end_time) for s in res.timeline] == [
        ("1", 0, 1),
        ("2", 1, 6),
        ("3", 6, 14),
        ("1", 14, 23),
    ]
    assert res.process("2").completion_time < res.timeline[-1].start_time
    assert res.process("1").response_time == 0
    assert res.process("3").response_time == 3


def test_srtf_completes():
    res = simulate(Policy.SRTF, _procs())
    assert {p.pid for p in res.processes} == {"P1", "P2", "P3"}
    assert res.metrics.cpu_busy_time == sum(p.burst_time for p in _procs())


def test_rr_quantum_2_scenario():
    res = simulate(Policy.ROUND_ROBIN, [Process("1", 0, 4), Process("2", 1, 3)], SchedulerConfig(quantum=2))
    assert [(s.pid, s.start_time, s.end_time) for s in res.timeline] == [
        ("1", 0, 2),
        ("2", 2, 4),
        ("1", 4, 6),
        ("2", 6, 7),
    ]
    assert res.process("2").response_time == 1


def test_rr_arrivals_queue_before_preempted_process():
    procs = [Process("A", 0, 4), Process("B", 2, 2)]
    res = simulate(Policy.ROUND_ROBIN, procs, SchedulerConfig(quantum=2))
    assert _order(res) == ["A", "B", "A"]


def test_rr_large_quantum_matches_fcfs():
    quantum = max(p.burst_time for p in _procs())
    rr = simulate(Policy.ROUND_ROBIN, _procs(), SchedulerConfig(quantum=quantum))
    fcfs = simulate(Policy.FCFS, _procs())
    for p in fcfs.processes:
        assert rr.process(p.pid).response_time == p.response_time
        assert rr.process(p.pid).completion_time == p.completion_time


@pytest.mark.parametrize("quantum", [None, 0, -1])
def test_rr_rejects_bad_quantum(quantum):
    with pytest.raises(InvalidQuantumError):
        simulate(Policy.ROUND_ROBIN, _procs(), SchedulerConfig(quantum=quantum))


def test_priority_static():
    res = simulate(Policy.PRIORITY, _procs())
    # P1 is alone at t=0; P2 (priority 1) beats P3 (priority 3) afterwards
    assert _order(res) == ["P1", "P2", "P3"]


def test_priority_without_value_runs_last():
    procs = [
        Process("A", 0, 1, priority=1),
        Process("B", 1, 2),
        Process("C", 1, 2, priority=9),
    ]
    assert _order(simulate(Policy.PRIORITY, procs)) == ["A", "C", "B"]


def test_preemptive_priority_lower_value_preempts():
    res = simulate(Policy.PREEMPTIVE_PRIORITY, _procs())
    assert [(s.pid, s.start_time, s.end_time) for s in res.timeline] == [
        ("P1", 0, 1),
        ("P2", 1, 4),
        ("P1", 4, 8),
        ("P3", 8, 16),
    ]


def test_priority_policies_share_ordering_convention():
    # Everything arrives together, so preemption never kicks in.
    procs = [Process("A", 0, 3, priority=5), Process("B", 0, 3, priority=1)]
    assert _order(simulate(Policy.PRIORITY, procs))[0] == "B"
    assert _order(simulate(Policy.PREEMPTIVE_PRIORITY, procs))[0] == "B"


def _idle_gap_workload():
    # CPU goes idle over [6, 8); equal bursts and priorities on both sides of the gap.
    return [
        Process("A", 0, 3, priority=2),
        Process("B", 0, 3, priority=2),
        Process("C", 8, 2, priority=1),
        Process("D", 8, 2, priority=1),
        Process("E", 9, 1, priority=3),
    ]


@pytest.mark.parametrize("workload", [demo_workload, _idle_gap_workload])
@pytest.mark.parametrize("policy", list(Policy))
def test_timing_invariants_hold_for_every_policy(policy, workload):
    procs = workload()
    res = simulate(policy, procs, _config(policy))
    assert len(res.processes) == len(procs)

    for p in res.processes:
        assert p.remaining_time == 0
        assert p.turnaround_time == p.completion_time - p.arrival_time
        assert p.waiting_time == p.turnaround_time - p.burst_time
        assert p.waiting_time >= 0
        assert 0 <= p.response_time <= p.completion_time - p.arrival_time
        assert p.response_time <= p.waiting_time
        executed = sum(s.duration for s in res.timeline if s.pid == p.pid)
        assert executed == p.burst_time

    assert res.metrics.throughput == len(procs) / max(p.completion_time for p in res.processes)
    assert 0 < res.metrics.throughput <= 1


@pytest.mark.parametrize("policy", list(Policy))
def test_idle_cpu_jumps_to_next_arrival(policy):
    res = simulate(policy, _idle_gap_workload(), _config(policy))
    assert max(res.process(pid).completion_time for pid in ("A", "B")) == 6
    # C ties D on every key and arrived first
    assert res.process("C").start_time == 8
    assert res.process("D").start_time > 8
    assert res.metrics.makespan == 13
    assert res.metrics.cpu_utilization == pytest.approx(11 / 13)


@pytest.mark.parametrize("policy", list(Policy))
def test_empty_workload_is_noop(policy):
    res = simulate(policy, [], _config(policy))
    assert res.processes == []
    assert res.timeline == []
    assert res.metrics.throughput == 0.0
    assert res.metrics.avg_waiting == 0.0


def test_caller_processes_are_not_mutated():
    procs = _procs()
    compare_policies(procs, quantum=2)
    for p in procs:
        assert p.remaining_time == p.burst_time
        assert p.completion_time is None
        assert p.response_time is None


def test_compare_runs_every_policy_independently():
    results = compare_policies(demo_workload(), quantum=2)
    assert set(results) == set(Policy)
    assert results[Policy.FCFS].process("P2").completion_time == 15
    assert results[Policy.ROUND_ROBIN].quantum == 2
    assert results[Policy.SJF].quantum is None


def test_run_algorithm_by_name():
    res = run_algorithm("RR", _procs(), quantum=2)
    assert res.policy == "Round Robin"
    with pytest.raises(ValueError, match="Unknown algorithm"):
        run_algorithm("lottery", _procs())


def test_exhausted_ready_set_is_an_invariant_error():
    run = _Run([Process("A", 0, 1)])
    run.admit()
    with pytest.raises(SchedulerInvariantError):
        run.skip_idle()


def test_result_keeps_input_order():
    procs = [Process("1", 0, 10), Process("2", 1, 5), Process("3", 3, 8)]
    res = simulate(Policy.SRTF, procs)
    assert [p.pid for p in res.processes] == ["1", "2", "3"]
    assert [p.completion_time for p in res.processes] == [23, 6, 14]
