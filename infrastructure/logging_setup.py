import logging
import sys

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "info") -> None:
    """
    Configura el logger raíz con un único handler a stderr.

    Llamar UNA vez, antes de arrancar uvicorn.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    # Evita handlers duplicados si se llama dos veces (p. ej. con reload).
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
    root.addHandler(handler)

    logging.captureWarnings(True)
