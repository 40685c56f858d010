"""Load expressions from plain text files or archives."""
from pathlib import Path
import tarfile
import tempfile
from typing import List
import zipfile

import py7zr
from pydantic import BaseModel, ConfigDict, Field, FilePath


class ExpressionSource(BaseModel):
    """
    A file holding one expression per line.

    Supported formats:
    - plain .txt files
    - .zip, .tar.xz and .7z archives, of which the first .txt member is read
    """

    model_config = ConfigDict(frozen=True)

    path: FilePath = Field(..., description="Path to the text file or archive")

    def read_expressions(self) -> List[str]:
        """
        Read every non-empty line of the source, stripped.

        :return: List of expressions
        :rtype: List[str]
        :raises ValueError: If the archive format is unsupported or contains no .txt file
        """
        if self.path.suffix == ".txt":
            # Plain text file: read directly
            content = self.path.read_text(encoding="utf-8")
        else:
            # Archive file: extract the first text file found
            content = self._extract_archive()
        return [line.strip() for line in content.splitlines() if line.strip()]

    @staticmethod
    def _first_txt(names: List[str], archive_kind: str) -> str:
        """
        Return the first .txt member name of an archive.

        :raises ValueError: If the archive holds no .txt file
        """
        for name in names:
            if name.endswith(".txt"):
                return name
        raise ValueError(f"📄❌ No .txt file found in {archive_kind} archive")

    def _extract_archive(self) -> str:
        """
        Extract the first .txt file found in the archive and return its content as a string.

        :return: Content of the extracted .txt file
        :rtype: str
        :raises ValueError: If no .txt file is found or format is unsupported
        """
        archive_path: Path = self.path
        # Create a temporary directory for safe extraction
        with tempfile.TemporaryDirectory() as tmpdir:
            tmpdir_path = Path(tmpdir)
            if archive_path.suffix == ".zip":
                with zipfile.ZipFile(archive_path, "r") as zf:
                    member = self._first_txt(zf.namelist(), "zip")
                    zf.extract(member, path=tmpdir_path)

            elif archive_path.suffixes[-2:] == [".tar", ".xz"]:
                with tarfile.open(archive_path, "r:xz") as tf:
                    files = {m.name: m for m in tf.getmembers() if m.isfile()}
                    member = self._first_txt(list(files), "tar.xz")
                    tf.extract(files[member], path=tmpdir_path, filter="data")

            elif archive_path.suffix == ".7z":
                with py7zr.SevenZipFile(archive_path, mode="r") as archive:
                    member = self._first_txt(archive.getnames(), "7z")
                    archive.extract(path=tmpdir_path, targets=[member])

            else:
                raise ValueError(f"📄❌ Unsupported file format: {archive_path.suffix}")

            return (tmpdir_path / member).read_text(encoding="utf-8")
