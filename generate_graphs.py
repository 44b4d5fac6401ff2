import sys

import matplotlib.pyplot as plt

from loader import load_processes
from simulator import PagingSimulator, TraceReporter

table_types = ['flat', 'two-level']
metrics = ['allocated_frames', 'page_faults', 'references']
titles = ['Allocated Frames', 'Page Faults', 'References']


def run_all(records):
    results = {}
    for table_type in table_types:
        simulator = PagingSimulator(table_type=table_type, reporter=TraceReporter(quiet=True))
        simulator.load(records)
        simulator.simulate()
        results[table_type] = simulator.collect_statistics()
    return results


def plot(results, filename='table_comparison.png'):
    pids = [p.pid for p in results[table_types[0]].processes]
    fig, axes = plt.subplots(1, 3, figsize=(15, 5))
    fig.suptitle('Flat vs Two-Level Page Table', fontsize=14, fontweight='bold')

    legend_handles = None
    x = range(len(pids))
    width = 0.35

    for idx, (metric, title) in enumerate(zip(metrics, titles)):
        ax = axes[idx]
        bars = []
        for offset, table_type in zip((-width / 2, width / 2), table_types):
            values = [getattr(p, metric) for p in results[table_type].processes]
            bars.append(ax.bar([i + offset for i in x], values, width, label=table_type))

        if idx == 0:
            legend_handles = [b[0] for b in bars]

        for group in bars:
            for bar in group:
                height = bar.get_height()
                ax.text(bar.get_x() + bar.get_width() / 2., height,
                        f'{int(height)}', ha='center', va='bottom', fontsize=9)

        ax.set_title(title)
        ax.set_xticks(list(x))
        ax.set_xticklabels([f'PID {pid}' for pid in pids])
        ax.grid(axis='y', alpha=0.3)

    fig.legend(legend_handles, table_types, loc='lower center', ncol=2, frameon=True)

    plt.tight_layout()
    plt.subplots_adjust(bottom=0.15)
    plt.savefig(filename, dpi=300, bbox_inches='tight')
    return fig


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print("usage: generate_graphs.py <process-records.bin>")
        return 1

    with open(argv[0], 'rb') as f:
        records = load_processes(f)

    print("Running simulations...")
    results = run_all(records)
    for table_type in table_types:
        stats = results[table_type]
        print(f"{table_type:<10} {stats}{' (out of memory)' if stats.out_of_memory else ''}")

    plot(results)
    print("\nGraph saved as 'table_comparison.png'")
    plt.show()
    return 0


if __name__ == '__main__':
    sys.exit(main())
