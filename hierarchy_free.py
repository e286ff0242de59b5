import os, csv, time, queue, logging, argparse
from multiprocessing import Pool, Process, Queue

from asrel_topology import BuildError, read_asrel
from hierarchy_config import ConfigError, HierarchyConfig
from hierarchy_strip import HEADER, analyze

log = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


class OutputError(Exception):
    pass


def write_rows(path, rows):
    with open(path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(HEADER)
        f.flush()
        while True:
            row = rows.get()
            if row is None:
                break
            writer.writerow(row)


# set once per worker by the pool initializer; workers only read them
_topology, _config = None, None


def init_worker(topology, config):
    global _topology, _config
    _topology, _config = topology, config


def analyze_asn(asn):
    return analyze(_topology, asn, _config)


class Runner(object):
    def __init__(self, topology, config, output, processes=None, queue_size=1024):
        self.topology = topology
        self.config = config
        self.output = output
        self.processes = processes or os.cpu_count()
        self.queue_size = queue_size

    def send(self, rows, writer, row):
        # blocks while the writer is behind; rows are never dropped
        while writer.is_alive():
            try:
                rows.put(row, timeout=1)
                return
            except queue.Full:
                continue
        raise OutputError('writer for %s exited with code %s' % (self.output, writer.exitcode))

    def run(self, asns):
        total = len(self.topology)
        rows = Queue(maxsize=self.queue_size)
        writer = Process(target=write_rows, args=(self.output, rows))
        writer.start()
        written = 0
        try:
            with Pool(self.processes, initializer=init_worker, initargs=(self.topology, self.config)) as pool:
                for record in pool.imap_unordered(analyze_asn, asns):
                    self.send(rows, writer, record.to_row(total))
                    written += 1
                    log.debug('AS%s done (%d rows)', record.asn, written)
        finally:
            if writer.is_alive():
                self.send(rows, writer, None)
            writer.join()
            if writer.exitcode != 0:
                # nobody will drain what is still buffered
                rows.cancel_join_thread()
        if writer.exitcode != 0:
            raise OutputError('writer for %s exited with code %s' % (self.output, writer.exitcode))
        return written


def setup_logging(verbose):
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = getattr(logging, os.environ.get('LOGLEVEL', 'WARNING').upper(), None)
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='hierarchy-free reachability per AS')
    parser.add_argument('-i', '--input', required=True, help='CAIDA as-rel snapshot (.txt, .bz2 or .gz)')
    parser.add_argument('-o', '--output', default='data.csv')
    parser.add_argument('-c', '--config', help='YAML file with tier1, tier2 and cloud_providers lists')
    parser.add_argument('-t', '--targets', choices=['curated', 'all'], default='curated')
    parser.add_argument('-a', '--asn', type=int, action='append', help='analyze only this AS (repeatable)')
    parser.add_argument('-p', '--processes', type=int, default=None)
    parser.add_argument('-q', '--queue-size', type=int, default=1024)
    parser.add_argument('--strict', action='store_true', help='reject repeated relationships')
    parser.add_argument('-v', '--verbose', action='count', default=0)
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.verbose)
    start = time.time()
    try:
        config = HierarchyConfig.from_yaml(args.config) if args.config else HierarchyConfig.default()
        topology = read_asrel(args.input, strict=args.strict)
        asns = args.asn if args.asn else config.targets(topology, args.targets)
        runner = Runner(topology, config, args.output, args.processes, args.queue_size)
        written = runner.run(asns)
    except (BuildError, ConfigError, OutputError) as e:
        log.error('%s', e)
        return 1
    log.info('Wrote %d rows to %s in %.1fs', written, args.output, time.time() - start)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
