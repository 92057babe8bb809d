"""Basic usage example for pgbgwriter."""

import sys
from pathlib import Path

# Add parent to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pgbgwriter import AgentHandler, DuckDBExecutor, MetricStore
from pgbgwriter.config import ConnectionSettings

SNAPSHOT = Path(__file__).parent.parent / "data" / "sample_bgwriter.csv"


def snapshot_executor(settings=None):
    executor = DuckDBExecutor()
    executor.load_snapshot_csv(SNAPSHOT)
    return executor


def main():
    """Evaluate the bgwriter metrics against a captured snapshot."""
    print("=" * 60)
    print("pgbgwriter snapshot demo")
    print("=" * 60)

    with MetricStore(snapshot_executor()) as store:
        # 1. Plain counters
        print("\n1. Counters:")
        for field in ["checkpoints_timed", "checkpoints_req", "buffers_alloc"]:
            print(f"   {field}: {store.fetch(field):,}")

        # 2. Checkpoint timings come back as floats
        print("\n2. Checkpoint write time (ms):")
        print(f"   {store.fetch('checkpoint_write_time'):,.1f}")

        # 3. Derived values
        print("\n3. Since stats reset:")
        print(f"   Elapsed: {store.fetch('stats_reset_interval'):,} s")
        print(f"   Avg checkpoint interval: {store.fetch('checkpoint_avg_interval'):.1f} s")

        # 4. Time ratio per action
        print("\n4. Checkpoint time ratio:")
        for action in ["all", "write", "sync"]:
            print(f"   {action}: {store.fetch('checkpoint_time_ratio', action):.6f}")

        # 5. Show generated SQL
        print("\n5. Generated SQL for the sync ratio:")
        print(f"   {store.get_sql('checkpoint_time_ratio', 'sync')}")

    # 6. The agent-facing handler, with an error reported instead of raised
    print("\n6. Agent handler:")
    handler = AgentHandler(
        ConnectionSettings(detect_version=False),
        executor_factory=snapshot_executor,
        report_error=lambda message: print(f"   reported: {message}"),
    )
    for key in ["pg.buffers_clean", "pg.checkpoint_time_ratio[,,bogus]"]:
        result = handler.handle(key)
        print(f"   {key}: ok={result.ok} value={result.value}")

    print("\n" + "=" * 60)
    print("Demo complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
