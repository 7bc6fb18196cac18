from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import numpy as np
from PIL import Image

from colorcard import main as cli


def test_cli_card_smoke(tmp_path):
    image = np.zeros((80, 120, 3), dtype=np.uint8)
    image[:, :] = [30, 120, 210]

    image_path = tmp_path / "photo.png"
    Image.fromarray(image).save(image_path)

    palette_path = tmp_path / "palette.csv"
    palette_path.write_text(
        "name,r,g,b\nAzure,30,120,210\nCrimson,200,30,30\n", encoding="utf-8"
    )

    out_path = tmp_path / "card.png"
    json_path = tmp_path / "result.json"

    repo_root = Path(__file__).resolve().parents[2]
    cmd = [
        sys.executable,
        "-m",
        "colorcard.main",
        "card",
        "--image",
        str(image_path),
        "--palette",
        str(palette_path),
        "--zoom",
        "1.5",
        "--pan",
        "-20",
        "10",
        "--sample",
        "100",
        "300",
        "--title",
        "Sky",
        "--out",
        str(out_path),
        "--json-out",
        str(json_path),
    ]

    completed = subprocess.run(
        cmd, cwd=repo_root, check=True, capture_output=True, text=True
    )

    assert completed.returncode == 0
    assert out_path.exists()
    with Image.open(out_path) as card:
        assert card.size == (630, 891)

    payload = json.loads(json_path.read_text(encoding="utf-8"))
    assert payload["matched_color"]["name"] == "Azure"
    assert payload["distance"] == 0.0
    assert payload["sample"] == {"r": 30, "g": 120, "b": 210}
    assert payload["source_rect"]["sw"] > 0
    assert payload["card_path"] == str(out_path)


def test_cli_match_prints_json(tmp_path, capsys):
    palette_path = tmp_path / "palette.json"
    palette_path.write_text(
        json.dumps(
            [
                {"name": "Red", "r": 255, "g": 0, "b": 0},
                {"name": "Blue", "r": 0, "g": 0, "b": 255},
            ]
        ),
        encoding="utf-8",
    )

    code = cli.main(["match", "--rgb", "240", "10", "20", "--palette", str(palette_path)])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["matched_color"]["name"] == "Red"
    assert payload["sample"] == {"r": 240, "g": 10, "b": 20}


def test_cli_match_reports_unusable_palette(tmp_path, capsys):
    palette_path = tmp_path / "palette.json"
    palette_path.write_text(json.dumps([{"bogus": 1}]), encoding="utf-8")

    code = cli.main(["match", "--rgb", "1", "2", "3", "--palette", str(palette_path)])

    assert code == cli.EXIT_NO_MATCH
    assert "palette_empty" in capsys.readouterr().err


def test_cli_palette_status_for_bundled_palette(capsys):
    code = cli.main(["palette"])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "ok"
    assert payload["loaded"] is True
    assert payload["colors"] > 10
