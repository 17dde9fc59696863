import signal

from dotenv import load_dotenv, find_dotenv

env_path = find_dotenv()
if env_path:
    load_dotenv(env_path, override=False)

from attendance.db import init_db  # noqa: E402
from attendance.main import configure  # noqa: E402
from attendance.scheduler import init_scheduler, shutdown_scheduler  # noqa: E402

if __name__ == "__main__":
    configure()
    init_db()
    init_scheduler()
    try:
        signal.pause()
    except KeyboardInterrupt:
        pass
    finally:
        shutdown_scheduler()
