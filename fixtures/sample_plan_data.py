"""
Sample maintenance plan rows for import testing.
Keys match the plan spreadsheet headers (Actividad, Frecuencia, Norma, ...).
"""

from pathlib import Path

import yaml


def get_sample_plan_rows() -> list[dict]:
    """Plan rows for an air compressor, year 2025."""
    return [
        {
            "Actividad": "Verificar nivel de aceite",
            "Frecuencia": "DIARIA",
            "Riesgo": "BAJO",
            "Fecha": "2025-01-02",
            "Dias": 1,
            "Horas": 8,
        },
        {
            "Actividad": "Limpieza de filtros de aire",
            "Frecuencia": "Semanal",
            "Riesgo": "MEDIO",
            "Fecha": "06/01/2025",
            "TR": 0.5,
            "TM": 0.25,
            "Dias": 1,
        },
        {
            "Actividad": "Cambio de correas",
            "Frecuencia": "MENSUAL",
            "Riesgo": "ALTO",
            "Fecha": 45672,  # 2025-01-15
            "TR": 2,
            "TM": 1,
            "Dias": 2,
        },
        {
            "Actividad": "Calibrar presostato",
            "Frecuencia": "MENSUAL",
            "Norma": "ISO 9001",
            "Riesgo": "ALTO",
            "Fecha": "2025-01-31",
            "TR": "1",
            "TM": "0,5",
            "Dias": 1,
        },
    ]


if __name__ == "__main__":
    # Write the rows as an import file for the planning CLI
    out = Path(__file__).parent.parent / "data" / "raw" / "sample_plan_2025.yaml"
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", encoding="utf-8") as f:
        yaml.safe_dump({"rows": get_sample_plan_rows()}, f, allow_unicode=True, sort_keys=False)
    print(f"Wrote {len(get_sample_plan_rows())} rows to {out}")
