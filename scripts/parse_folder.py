# scripts/parse_folder.py
#
# Uso: python scripts/parse_folder.py <config.json> <carpeta>
# Procesa todos los .xlsx de la carpeta con la configuración dada e imprime las estadísticas.

import json
import os
import sys

from tablero_auditorias.parsers.column_config import ColumnConfig
from tablero_auditorias.services.batch_runner import process_batch
from tablero_auditorias.services.stats import compute_stats, stats_to_dict


def main(argv):
    if len(argv) != 3:
        print("Uso: parse_folder.py <config.json> <carpeta>", file=sys.stderr)
        return 2

    config_path, folder = argv[1], argv[2]

    with open(config_path, encoding="utf-8") as fh:
        config = ColumnConfig.from_dict(json.load(fh))

    uploads = []
    for name in sorted(os.listdir(folder)):
        if not name.lower().endswith(".xlsx") or name.startswith("~$"):
            continue
        with open(os.path.join(folder, name), "rb") as fh:
            uploads.append((name, fh.read()))

    result = process_batch(uploads, config)

    for o in result.failed:
        print(f"ERROR {o.file_name}: {o.error}", file=sys.stderr)

    print(json.dumps({
        "batch": result.to_dict(),
        "stats": stats_to_dict(compute_stats(result.succeeded)),
    }, ensure_ascii=False, indent=2))

    return 0 if result.succeeded else 1


if __name__ == "__main__":
    sys.exit(main(sys.argv))
