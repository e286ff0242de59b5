import argparse
import numpy as np
import pandas as pd

COUNT_COLUMNS = ['provider_free', 'tier1_free', 'hierachy_free']


def load(path):
    return pd.read_csv(path)


def top(frame, by='hierachy_free', n=20, as_type=None):
    if as_type is not None:
        frame = frame[frame['type'] == as_type]
    return frame.sort_values(by, ascending=False, kind='stable').head(n)


def summarize(frame):
    share = frame['hierachy_free'].to_numpy(dtype=float) / frame['total'].to_numpy(dtype=float)
    rows = []
    for as_type in sorted(frame['type'].unique()):
        mask = (frame['type'] == as_type).to_numpy()
        rows.append({
            'type': as_type,
            'count': int(mask.sum()),
            'mean_share': float(np.mean(share[mask])),
            'median_share': float(np.median(share[mask])),
        })
    return pd.DataFrame(rows, columns=['type', 'count', 'mean_share', 'median_share'])


def main(argv=None):
    parser = argparse.ArgumentParser(description='top ASes by hierarchy-free reachability')
    parser.add_argument('-i', '--input', default='data.csv')
    parser.add_argument('-n', '--number', type=int, default=20)
    parser.add_argument('-b', '--by', choices=COUNT_COLUMNS, default='hierachy_free')
    parser.add_argument('-t', '--type', choices=['tier1', 'tier2', 'cloud_provider', 'other'])
    parser.add_argument('-s', '--summary', action='store_true')
    args = parser.parse_args(argv)

    frame = load(args.input)
    print(top(frame, args.by, args.number, args.type).to_string(index=False))
    if args.summary:
        print()
        print(summarize(frame).to_string(index=False))
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
