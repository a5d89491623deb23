import threading

from sessionlog import Level


def test_threads_share_one_logger(registry, log_dir, read_log):
    logger = registry.get_or_create("svc")
    logger.log_level = Level.ERROR

    def worker(n):
        for i in range(50):
            logger.info(f"t{n}-{i}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    messages = [line.rsplit(" - ", 1)[1] for line in read_log(log_dir)]
    assert len(messages) == 400
    assert len(set(messages)) == 400
    for n in range(8):
        mine = [m for m in messages if m.startswith(f"t{n}-")]
        assert mine == [f"t{n}-{i}" for i in range(50)]


def test_threads_with_own_sessions(registry, log_dir, read_log):
    logger = registry.get_or_create("svc")
    logger.log_level = Level.ERROR

    def worker(n):
        with logger.session(f"s{n}") as s:
            for i in range(10):
                s.info(f"s{n}-{i}")

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    lines = read_log(log_dir)
    assert len(lines) == 6 * (5 + 10)
    for n in range(6):
        start = lines.index(f"┃ Session: s{n}")
        body = [line.rsplit(" - ", 1)[1] for line in lines[start + 3 : start + 13]]
        assert body == [f"s{n}-{i}" for i in range(10)]
