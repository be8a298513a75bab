from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from pydantic import ValidationError

from yorihime.config import AddressDatabase, AppConfig, GameRecord, parse_hex_offset


class AddressDatabaseTests(unittest.TestCase):
    def test_bundled_database_loads(self) -> None:
        database = AddressDatabase.bundled()
        self.assertGreater(len(database), 0)
        game = database.get_game("th06.exe")
        self.assertIsNotNone(game)
        self.assertEqual(game.name, "Touhou 06 - Embodiment of Scarlet Devil")
        self.assertEqual(game.score_offset, 0x0069BCA0)
        self.assertIn("東方紅魔郷.exe", game.alternate_names)
        for name, record in database.games.items():
            self.assertEqual(name, record.process_name)

    def test_from_json_decodes_hex_offsets(self) -> None:
        data = {
            "game.exe": {
                "name": "Game",
                "process_name": "game.exe",
                "score_offset": "0x10",
                "live_offset": "0XfF",
                "bomb_offset": "0x0",
            }
        }
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "db.json"
            path.write_text(json.dumps(data), encoding="utf-8")
            database = AddressDatabase.from_json(path)
        game = database.get_game("game.exe")
        self.assertEqual((game.score_offset, game.live_offset, game.bomb_offset), (0x10, 0xFF, 0))
        self.assertEqual(game.alternate_names, [])
        self.assertEqual(game.names, ["game.exe"])
        self.assertIsNone(database.get_game("other.exe"))

    def test_offsets_must_be_prefixed_hex(self) -> None:
        base = {"name": "G", "process_name": "g.exe", "live_offset": "0x1", "bomb_offset": "0x2"}
        for bad in ["1234", "0xZZ", "0x", None]:
            with self.subTest(bad=bad):
                with self.assertRaises(ValidationError):
                    GameRecord.model_validate({**base, "score_offset": bad})

    def test_parse_hex_offset(self) -> None:
        self.assertEqual(parse_hex_offset("0x0069BCA0"), 0x0069BCA0)
        self.assertEqual(parse_hex_offset(16), 16)
        with self.assertRaises(ValueError):
            parse_hex_offset(True)


class AppConfigTests(unittest.TestCase):
    def test_missing_file_gives_defaults(self) -> None:
        config = AppConfig.load("/nonexistent/yorihime.toml")
        self.assertEqual(config.events.tick_rate_ms, 200)
        self.assertAlmostEqual(config.tick_rate, 0.2)
        self.assertEqual(config.events.backend, "terminal")
        self.assertEqual(config.logging.level, "INFO")
        self.assertEqual(config.database.path, "")

    def test_from_toml(self) -> None:
        text = (
            "[events]\n"
            "tick_rate_ms = 50\n"
            "backend = \"global\"\n"
            "[logging]\n"
            "level = \"debug\"\n"
            "file = \"\"\n"
        )
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "yorihime.toml"
            path.write_text(text, encoding="utf-8")
            config = AppConfig.load(path)
        self.assertEqual(config.events.tick_rate_ms, 50)
        self.assertEqual(config.events.backend, "global")
        self.assertEqual(config.logging.level, "DEBUG")
        self.assertEqual(config.logging.file, "")

    def test_invalid_values_are_rejected(self) -> None:
        for data in [
            {"events": {"tick_rate_ms": 0}},
            {"events": {"backend": "mouse"}},
            {"logging": {"level": "LOUD"}},
        ]:
            with self.subTest(data=data):
                with self.assertRaises(ValidationError):
                    AppConfig.model_validate(data)

    def test_database_path_overrides_bundled(self) -> None:
        data = {
            "x.exe": {
                "name": "X",
                "process_name": "x.exe",
                "score_offset": "0x1",
                "live_offset": "0x2",
                "bomb_offset": "0x3",
            }
        }
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "db.json"
            path.write_text(json.dumps(data), encoding="utf-8")
            config = AppConfig.model_validate({"database": {"path": str(path)}})
            database = config.load_database()
        self.assertEqual(list(database.games), ["x.exe"])
        self.assertEqual(len(AppConfig().load_database()), len(AddressDatabase.bundled()))


if __name__ == "__main__":
    unittest.main()
