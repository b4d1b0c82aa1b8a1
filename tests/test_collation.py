from address_verification.services.collation import (
    sorted_by_name,
    turkish_equals,
    turkish_sort_key,
)


def test_province_names_follow_turkish_alphabet():
    names = [
        "Zonguldak", "Çankırı", "Ağrı", "Iğdır", "İzmir", "Şanlıurfa", "Sinop",
        "Ordu", "Ödemiş", "Uşak", "Ünye", "Giresun", "Gümüşhane", "Hakkari", "Cizre",
    ]
    expected = [
        "Ağrı", "Cizre", "Çankırı", "Giresun", "Gümüşhane", "Hakkari", "Iğdır",
        "İzmir", "Ordu", "Ödemiş", "Sinop", "Şanlıurfa", "Uşak", "Ünye", "Zonguldak",
    ]
    assert sorted(names, key=turkish_sort_key) == expected


def test_dotless_i_sorts_before_dotted_i():
    assert sorted(["İnegöl", "Isparta"], key=turkish_sort_key) == ["Isparta", "İnegöl"]


def test_digits_and_spaces_sort_before_letters():
    assert sorted(["Bahçe", "1. Bölge", "Bahçe Sokak"], key=turkish_sort_key) == [
        "1. Bölge",
        "Bahçe",
        "Bahçe Sokak",
    ]


def test_turkish_equals():
    assert turkish_equals("ISPARTA", "ısparta")
    assert turkish_equals(" İzmir ", "izmir")
    assert not turkish_equals("Izmir", "izmir")


def test_sorted_by_name_uses_the_name_key():
    class Item:
        def __init__(self, name):
            self.name = name

    items = [Item("Şile"), Item("Sarıyer"), Item("Çatalca")]
    assert [i.name for i in sorted_by_name(items)] == ["Çatalca", "Sarıyer", "Şile"]


def test_punctuation_sorts_before_letters():
    names = ["Gaziler", "Gazi-Osman", "Atatürk Mahallesi", "Atatürk Mah.", "Hacı'nın", "Hacılar"]
    assert sorted(names, key=turkish_sort_key) == [
        "Atatürk Mah.",
        "Atatürk Mahallesi",
        "Gazi-Osman",
        "Gaziler",
        "Hacı'nın",
        "Hacılar",
    ]
