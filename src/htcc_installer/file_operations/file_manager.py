from pathlib import Path

class FileManager:
    @staticmethod
    def write_to_file(filepath: Path, content: str):
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_text(content, encoding="utf-8")
        except OSError as e:
            raise IOError(f"Failed to write to file {filepath}: {e}")

    @staticmethod
    def append_to_file(filepath: Path, content: str):
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            with filepath.open("a", encoding="utf-8") as f:
                f.write(content)
        except OSError as e:
            raise IOError(f"Failed to append to file {filepath}: {e}")

    @staticmethod
    def read_file(filepath: Path) -> str:
        try:
            return filepath.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise FileNotFoundError(f"File {filepath} not found.")
        except OSError as e:
            raise IOError(f"Failed to read file {filepath}: {e}")

    @staticmethod
    def read_text_guess_encoding(filepath: Path) -> str:
        """Read a text file that may be UTF-16 (regedit exports) or UTF-8."""
        try:
            raw = filepath.read_bytes()
        except FileNotFoundError:
            raise FileNotFoundError(f"File {filepath} not found.")
        except OSError as e:
            raise IOError(f"Failed to read file {filepath}: {e}")

        if raw.startswith((b"\xff\xfe", b"\xfe\xff")):
            return raw.decode("utf-16")
        return raw.decode("utf-8-sig")
