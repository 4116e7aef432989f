import io
import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from cir.model import MemberSignature, Parameter, TypeDescriptor, TypeRef
from implementor.encoding import UnicodeEscapingWriter, escape_non_ascii
from implementor.renderer import SourceRenderer
from implementor.sink import write_unit


def test_ascii_passes_through():
    text = "public class A {\n\t}\n"
    assert escape_non_ascii(text) == text


def test_non_ascii_is_escaped_with_four_hex_digits():
    assert escape_non_ascii("caf\u00e9") == "caf\\u00E9"
    assert escape_non_ascii("\u0416") == "\\u0416"
    assert escape_non_ascii("\u20ac1") == "\\u20AC1"


def test_supplementary_characters_become_surrogate_pairs():
    assert escape_non_ascii("\U0001D538") == "\\uD835\\uDD38"


def test_writer_wraps_every_write():
    out = io.StringIO()
    writer = UnicodeEscapingWriter(out)
    writer.write("na\u00efve ")
    writer.writelines(["\u00fcber", "\n"])

    assert out.getvalue() == "na\\u00EFve \\u00FCber\n"


def test_written_unit_is_seven_bit_clean(tmp_path):
    descriptor = TypeDescriptor(name="i18n.Gr\u00fc\u00dfe", simple_name="Gr\u00fc\u00dfe", kind="interface", package="i18n")
    member = MemberSignature(
        name="gr\u00f6\u00dfe",
        declaring_type=descriptor.name,
        parameters=(Parameter("na\u00efve", TypeRef("int")),),
        return_type=TypeRef("int"),
        modifiers=("abstract", "public"),
    )
    unit = SourceRenderer(line_separator="\n").render(descriptor, (), [member])
    path = write_unit(unit, tmp_path)

    assert path == tmp_path / "i18n" / "Gr\u00fc\u00dfeImpl.java"
    data = path.read_bytes()
    assert all(b < 128 for b in data)
    text = data.decode("ascii")
    assert "public int gr\\u00F6\\u00DFe(int na\\u00EFve) {" in text
    assert "implements i18n.Gr\\u00FC\\u00DFe {" in text
