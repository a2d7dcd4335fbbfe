import pytest
import struct
import sys
from pathlib import Path
from typing import Dict, List
from PIL import Image

# Add src to sys.path so we can import obbook
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())


def write_bsa(path: Path, folders: Dict[str, List[str]], *, version: int = 103, flags: int = 0x3) -> Path:
    """
    Write a minimal .bsa archive listing `folders` (no file data).

    Args:
        path: Archive to create
        folders: Folder name (backslash separated) -> file names
        version: Header version
        flags: Archive flags (0x3 = folder and file names stored)
    """
    folder_record = struct.Struct("<QIIQ" if version == 105 else "<QII")
    folder_items = list(folders.items())
    file_count = sum(len(files) for _, files in folder_items)
    folder_names_length = sum(len(name) + 1 for name, _ in folder_items)
    name_block = b"".join(name.encode("cp1252") + b"\x00" for _, files in folder_items for name in files)

    header = struct.pack(
        "<4sIIIIIIII",
        b"BSA\x00",
        version,
        36,
        flags,
        len(folder_items),
        file_count,
        folder_names_length,
        len(name_block),
        0,
    )

    records = b""
    blocks = b""
    for name, files in folder_items:
        fields = (0, len(files), 0, 0) if version == 105 else (0, len(files), 0)
        records += folder_record.pack(*fields)
        encoded = name.encode("cp1252") + b"\x00"
        blocks += bytes([len(encoded)]) + encoded
        blocks += b"".join(struct.pack("<QII", 0, 0, 0) for _ in files)

    path.write_bytes(header + records + blocks + name_block)
    return path


def write_texture(path: Path, size=(32, 16), color="red") -> Path:
    """Write a small image to a texture path (Pillow reads by content)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", size, color=color).save(path, format="PNG")
    return path


# Common test fixtures
@pytest.fixture
def oblivion_root(tmp_path: Path) -> Path:
    """
    Fake game install:

        Oblivion/Data/Fonts/Kingthings_Regular.fnt
        Oblivion/Data/Fonts/Tahoma_Bold_Small.fnt
        Oblivion/Data/Textures/Menus/Book/Fancy/Scroll.dds (32x16)
        Oblivion/Data/Textures/Menus/Book/Plain.dds (20x10)
    """
    root = tmp_path / "Oblivion"
    fonts = root / "Data" / "Fonts"
    fonts.mkdir(parents=True)
    (fonts / "Kingthings_Regular.fnt").write_bytes(b"\x00" * 8)
    (fonts / "Tahoma_Bold_Small.fnt").write_bytes(b"\x00" * 8)

    book = root / "Data" / "Textures" / "Menus" / "Book"
    write_texture(book / "Fancy" / "Scroll.dds", size=(32, 16))
    write_texture(book / "Plain.dds", size=(20, 10), color="blue")
    return root


@pytest.fixture
def data_directory(oblivion_root: Path) -> Path:
    return oblivion_root / "Data"


@pytest.fixture
def bsa_writer():
    """The write_bsa helper, for archive tests."""
    return write_bsa


@pytest.fixture
def texture_writer():
    """The write_texture helper."""
    return write_texture
