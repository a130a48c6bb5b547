import pytest

from transaction_extraction.noise import is_noise, is_section_marker, reject_line


@pytest.mark.parametrize(
    "fragment",
    [
        "Total Cash Masuk: 500.000",
        "Subtotal 250.000",
        "GRAND TOTAL",
        "Jumlah (Rp)",
        "Sumber",
        "Source: bank",
        "Platform",
        "Saldo (Rp)",
        "Balance (Rp) 1.000.000",
        "amount",
    ],
)
def test_markers_are_noise_case_insensitively(fragment):
    assert is_noise(fragment)


@pytest.mark.parametrize("fragment", ["Bude Tun - 100.000", "GoPay", "Makan siang 25rb", "Gaji"])
def test_transaction_like_fragments_are_not_noise(fragment):
    assert not is_noise(fragment)


def test_section_marker_must_lead_the_line():
    assert is_section_marker("💰 Pemasukan 2024")
    assert is_section_marker("   📤 Pengeluaran 10")
    assert not is_section_marker("Kopi 💰 20.000")


@pytest.mark.parametrize(
    ("line", "reason"),
    [
        ("Pemasukan", "no_digits"),
        ("📥 Masuk 1", "section"),
        ("Total Keluar: 200.000", "noise"),
        ("Kopi - 20.000", None),
    ],
)
def test_reject_line_reasons(line, reason):
    assert reject_line(line) == reason
