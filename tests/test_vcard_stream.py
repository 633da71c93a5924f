"""Tests for reading and writing vCard content."""

import datetime
import pathlib

import pytest

from pimcodec.contact import (
    Address,
    CalendarUri,
    Contact,
    Email,
    InstantMessage,
    Key,
    Language,
    Phone,
    Relation,
)
from pimcodec.exceptions import CodecGenerateError
from pimcodec.types.const import (
    ContactKind,
    EmailType,
    Gender,
    KeyType,
    PhoneType,
    RelationType,
)
from pimcodec.types.geo import Geo
from pimcodec.util import NO_YEAR, IdGenerator
from pimcodec.vcard_stream import (
    generate_single_vcard,
    generate_vcard_file,
    parse_vcard_file,
)

TESTDATA_PATH = pathlib.Path(__file__).parent / "testdata"


def test_parse_apple_contacts() -> None:
    """Test reading vCard 3.0 content with legacy conventions."""
    result = parse_vcard_file((TESTDATA_PATH / "apple_contacts.vcf").read_text())
    assert not result.errors
    assert len(result.items) == 2

    jane = result.items[0]
    assert jane.formatted_name == "Dr. Jane Doe"
    assert jane.family_name == "Doe"
    assert jane.given_name == "Jane"
    assert jane.additional_name == "Q."
    assert jane.name_prefix == "Dr."
    assert jane.name_suffix == "PhD"
    assert jane.organization == "Example Corp"
    assert jane.title == "Scientist"
    assert jane.prod_id == "-//Apple Inc.//iPhone OS 17.0//EN"
    assert jane.emails == [
        Email(email="jane.doe@example.com", type="internet", is_primary=True),
        Email(email="jane@home.example", type="internet"),
    ]
    assert jane.phones == [
        Phone(number="+1 (555) 010-0100", type=PhoneType.CELL, is_primary=True),
        Phone(number="555-0101", type=PhoneType.HOME),
    ]
    assert jane.addresses == [
        Address(
            street_address="123 Main St",
            locality="Springfield",
            region="IL",
            postal_code="62701",
            country="USA",
            type="home",
            is_primary=True,
        )
    ]
    assert jane.birthday == datetime.date(NO_YEAR, 4, 12)
    assert jane.im_handles == [InstantMessage(service="twitter", handle="janedoe")]
    assert jane.note == (
        "Met at the conference, 2023.\n"
        "Follow up in the spring about the joint research proposal."
    )
    assert jane.categories == ["Friends", "Work"]

    john = result.items[1]
    assert john.formatted_name == "John Smith"
    assert john.family_name == "Smith"
    assert john.given_name == "John"
    assert john.additional_name is None
    assert john.phones == [Phone(number="+44 20 7946 0958", type=PhoneType.WORK)]
    assert john.prod_id is None


def test_parse_organization() -> None:
    """Test reading vCard 4.0 content."""
    result = parse_vcard_file((TESTDATA_PATH / "organization.vcf").read_text())
    assert not result.errors
    assert len(result.items) == 1

    contact = result.items[0]
    assert contact.uid == "urn:uuid:4fbe8971-0bc3-424c-9c26-36c3e1eff6b1"
    assert contact.kind == ContactKind.ORG
    assert contact.logo_url == "https://example.com/logo.png"
    assert contact.emails == [
        Email(email="info@example.com", type=EmailType.WORK, is_primary=True)
    ]
    assert contact.phones == [
        Phone(number="+1-555-0199", type=PhoneType.VOICE, is_primary=True)
    ]
    assert contact.geo == Geo(lat=37.386013, lng=-122.082932)
    assert contact.timezone == "America/Los_Angeles"
    assert contact.url == "https://example.com"
    assert contact.im_handles == [
        InstantMessage(service="xmpp", handle="labs@example.com")
    ]
    assert contact.languages == [
        Language(tag="en", is_primary=True),
        Language(tag="fr-CA"),
    ]
    assert contact.keys == [Key(uri="https://example.com/key.asc", type=KeyType.PGP)]
    assert contact.relations == [
        Relation(
            related_name="urn:uuid:03a0e51f-d1aa-4385-8a53-e29025acd8af",
            relation_type=RelationType.AGENT,
        )
    ]
    assert contact.members == ["urn:uuid:03a0e51f-d1aa-4385-8a53-e29025acd8af"]
    assert contact.fb_urls == [
        CalendarUri(uri="https://example.com/busy/labs", is_primary=True)
    ]
    assert contact.cal_uris == [CalendarUri(uri="https://example.com/calendar/labs")]
    assert contact.revision == datetime.datetime(
        2024, 1, 1, tzinfo=datetime.timezone.utc
    )


def test_generate_single_vcard(id_generator: IdGenerator) -> None:
    """Test the exact output for a contact."""
    contact = Contact(
        formatted_name="Ada Lovelace",
        given_name="Ada",
        family_name="Lovelace",
        birthday=datetime.date(1815, 12, 10),
        emails=[
            Email(email="ada@example.com", type="work", is_primary=True),
            Email(email="ada@home.example", is_primary=True),
        ],
        phones=[Phone(number="+44 20 7946 0000", type="cell")],
    )
    assert generate_single_vcard(contact, id_generator=id_generator) == (
        "BEGIN:VCARD\r\n"
        "VERSION:4.0\r\n"
        "PRODID:-//AppStandard Contacts//EN\r\n"
        "UID:urn:uuid:00000000-0000-4000-8000-000000000001\r\n"
        "FN:Ada Lovelace\r\n"
        "N:Lovelace;Ada;;;\r\n"
        "BDAY:18151210\r\n"
        "EMAIL;TYPE=WORK;PREF=1:ada@example.com\r\n"
        "EMAIL:ada@home.example\r\n"
        "TEL;VALUE=uri;TYPE=CELL:tel:+442079460000\r\n"
        "REV:2024-03-04T05:06:07Z\r\n"
        "END:VCARD\r\n"
    )


def test_generate_custom_prodid(id_generator: IdGenerator) -> None:
    """Test the product identifier can be overridden."""
    contact = Contact(formatted_name="Test", uid="existing-uid")
    ics = generate_single_vcard(contact, "-//Example//EN", id_generator=id_generator)
    assert "PRODID:-//Example//EN\r\n" in ics
    assert "UID:existing-uid\r\n" in ics
    assert "urn:uuid:" not in ics


def test_generate_default_uid() -> None:
    """Test a contact without a UID gets a random urn:uuid."""
    first = generate_single_vcard(Contact(formatted_name="Test"))
    second = generate_single_vcard(Contact(formatted_name="Test"))
    uids = [
        line for ics in (first, second) for line in ics.split("\r\n") if line.startswith("UID:")
    ]
    assert len(uids) == 2
    assert all(uid.startswith("UID:urn:uuid:") for uid in uids)
    assert uids[0] != uids[1]


def test_round_trip(id_generator: IdGenerator) -> None:
    """Test contacts read back the same after being written."""
    original = parse_vcard_file((TESTDATA_PATH / "apple_contacts.vcf").read_text())
    ics = generate_vcard_file(original.items, id_generator=id_generator)
    assert ics.count("BEGIN:VCARD\r\n") == 2
    assert ics.count("VERSION:4.0\r\n") == 2

    result = parse_vcard_file(ics)
    assert not result.errors
    assert len(result.items) == 2
    for before, after in zip(original.items, result.items):
        exclude = {"uid", "revision", "prod_id", "phones"}
        assert after.model_dump(exclude=exclude) == before.model_dump(exclude=exclude)
        assert [phone.number for phone in after.phones] == [
            "".join(phone.number.split()) for phone in before.phones
        ]
        assert after.revision == datetime.datetime(
            2024, 3, 4, 5, 6, 7, tzinfo=datetime.timezone.utc
        )

    # Each contact keeps the product that wrote it
    assert result.items[0].prod_id == "-//Apple Inc.//iPhone OS 17.0//EN"
    assert result.items[1].prod_id == "-//AppStandard Contacts//EN"


def test_primary_keep_first(id_generator: IdGenerator) -> None:
    """Test only the first entry marked primary is written with PREF."""
    contact = Contact(
        formatted_name="Test",
        phones=[
            Phone(number="555-0100"),
            Phone(number="555-0101", is_primary=True),
            Phone(number="555-0102", is_primary=True),
        ],
        languages=[Language(tag="en", is_primary=True), Language(tag="de", is_primary=True)],
    )
    lines = generate_single_vcard(contact, id_generator=id_generator).split("\r\n")
    assert "TEL;VALUE=uri:tel:555-0100" in lines
    assert "TEL;VALUE=uri;PREF=1:tel:555-0101" in lines
    assert "TEL;VALUE=uri:tel:555-0102" in lines
    assert "LANG;PREF=1:en" in lines
    assert "LANG:de" in lines


def test_gender() -> None:
    """Test the GENDER sex code and identity."""
    result = parse_vcard_file("BEGIN:VCARD\nFN:Test\nGENDER:f;woman\nEND:VCARD\n")
    assert not result.errors
    contact = result.items[0]
    assert contact.gender == Gender.FEMALE
    assert contact.gender_identity == "woman"
    assert "GENDER:F;woman\r\n" in generate_single_vcard(contact)


def test_keys(id_generator: IdGenerator) -> None:
    """Test KEY values referenced by uri or included inline."""
    contact = Contact(
        formatted_name="Test",
        keys=[
            Key(uri="https://example.com/key.asc", type="pgp"),
            Key(value="AAAAB3NzaC1yc2E", type=KeyType.SSH),
            Key(uri="https://example.com/cert.pem"),
        ],
    )
    lines = generate_single_vcard(contact, id_generator=id_generator).split("\r\n")
    assert (
        "KEY;VALUE=URI;MEDIATYPE=application/pgp-keys:https://example.com/key.asc"
        in lines
    )
    assert "KEY;MEDIATYPE=application/ssh-keys:AAAAB3NzaC1yc2E" in lines
    assert "KEY;VALUE=URI:https://example.com/cert.pem" in lines

    result = parse_vcard_file("\r\n".join(lines))
    assert result.items[0].keys == contact.keys


def test_key_type_from_mediatype() -> None:
    """Test the key type is read from the TYPE or MEDIATYPE parameter."""
    result = parse_vcard_file(
        "\n".join(
            [
                "BEGIN:VCARD",
                "FN:Test",
                "KEY;MEDIATYPE=application/pkix-cert:https://example.com/cert.cer",
                "KEY;TYPE=ssh:AAAAB3NzaC1yc2E",
                "KEY;ENCODING=b:MIICajCCAdOgAwIBAgICBEUwDQYJKoZIhvcN",
                "END:VCARD",
            ]
        )
    )
    assert not result.errors
    assert result.items[0].keys == [
        Key(uri="https://example.com/cert.cer", type=KeyType.X509),
        Key(value="AAAAB3NzaC1yc2E", type=KeyType.SSH),
        Key(value="MIICajCCAdOgAwIBAgICBEUwDQYJKoZIhvcN"),
    ]


def test_social_profiles() -> None:
    """Test legacy social profile properties are read as messaging handles."""
    result = parse_vcard_file(
        "\n".join(
            [
                "BEGIN:VCARD",
                "FN:Test",
                "X-TWITTER:@test",
                "X-FACEBOOK:test.user",
                "X-SOCIALPROFILE;TYPE=linkedin:https://linkedin.com/in/test",
                "IMPP;X-SERVICE-TYPE=Skype:skype:test.user",
                "END:VCARD",
            ]
        )
    )
    assert not result.errors
    assert result.items[0].im_handles == [
        InstantMessage(service="twitter", handle="@test"),
        InstantMessage(service="facebook", handle="test.user"),
        InstantMessage(service="linkedin", handle="https://linkedin.com/in/test"),
        InstantMessage(service="skype", handle="test.user"),
    ]


def test_photo_must_be_uri() -> None:
    """Test inline photos are ignored."""
    result = parse_vcard_file(
        "\n".join(
            [
                "BEGIN:VCARD",
                "VERSION:3.0",
                "FN:Test",
                "PHOTO;ENCODING=b;TYPE=JPEG:/9j/4AAQSkZJRgABAQ",
                "SOUND;VALUE=uri:https://example.com/name.ogg",
                "END:VCARD",
            ]
        )
    )
    assert not result.errors
    assert result.items[0].photo_url is None
    assert result.items[0].sound_url == "https://example.com/name.ogg"


def test_invalid_properties() -> None:
    """Test a property that can't be parsed is left out of its contact."""
    result = parse_vcard_file(
        "\n".join(
            [
                "BEGIN:VCARD",
                "FN:Test",
                "BDAY:not-a-date",
                "GENDER:Q",
                "KIND:robot",
                "IMPP:no-scheme",
                "ADR:;;;;;;",
                "EMAIL:test@example.com",
                "END:VCARD",
            ]
        )
    )
    assert result.errors == [
        "Failed to parse property BDAY in VCARD #1 (\"Test\"): "
        "Invalid date value 'not-a-date'",
        "Failed to parse property GENDER in VCARD #1 (\"Test\"): "
        "Invalid GENDER value 'Q'",
        "Failed to parse property KIND in VCARD #1 (\"Test\"): "
        "Invalid KIND value 'robot'",
        "Failed to parse property IMPP in VCARD #1 (\"Test\"): "
        "Expected IMPP value to be a uri: 'no-scheme'",
        "Failed to parse property ADR in VCARD #1 (\"Test\"): ADR is empty",
    ]
    assert len(result.items) == 1
    contact = result.items[0]
    assert contact.birthday is None
    assert contact.gender is None
    assert contact.kind is None
    assert contact.addresses == []
    assert contact.emails == [Email(email="test@example.com")]


def test_missing_fn() -> None:
    """Test a contact without a formatted name is dropped."""
    result = parse_vcard_file(
        "BEGIN:VCARD\nN:Doe;Jane;;;\nEND:VCARD\nBEGIN:VCARD\nFN:Valid\nEND:VCARD\n"
    )
    assert [contact.formatted_name for contact in result.items] == ["Valid"]
    assert result.errors == ["vCard missing required FN property (VCARD #1)"]


@pytest.mark.parametrize("content", ["", "\r\n", "BEGIN:VCALENDAR\nEND:VCALENDAR\n"])
def test_empty_document(content: str) -> None:
    """Test content without any contacts."""
    result = parse_vcard_file(content)
    assert result.items == []
    assert result.errors == ["No valid vCard entries found in the file."]


def test_not_a_string() -> None:
    """Test content must be text."""
    with pytest.raises(TypeError):
        parse_vcard_file(b"BEGIN:VCARD\r\nFN:Test\r\nEND:VCARD\r\n")  # type: ignore[arg-type]


def test_generate_missing_fn(id_generator: IdGenerator) -> None:
    """Test writing a contact without a formatted name."""
    with pytest.raises(CodecGenerateError, match="Contact at index 1 missing required FN"):
        generate_vcard_file(
            [Contact(formatted_name="Valid"), Contact(formatted_name="  ")],
            id_generator=id_generator,
        )
    with pytest.raises(CodecGenerateError, match="^Contact missing required FN$"):
        generate_single_vcard(Contact(formatted_name=""))


def test_generate_empty() -> None:
    """Test writing no contacts produces no output."""
    assert generate_vcard_file([]) == ""


def test_long_lines_folded(id_generator: IdGenerator) -> None:
    """Test long values are folded and read back unchanged."""
    note = "Notizen über das Treffen 🎉 " * 20
    contact = Contact(formatted_name="Test", note=note.strip())
    ics = generate_single_vcard(contact, id_generator=id_generator)
    for line in ics.split("\r\n"):
        assert len(line.encode("utf-8")) <= 75
    result = parse_vcard_file(ics)
    assert result.items[0].note == note.strip()


def test_round_trip_metadata_properties(id_generator: IdGenerator) -> None:
    """Test the less common properties are escaped and read back unchanged."""
    contact = Contact(
        formatted_name="Ada Lovelace",
        uid="ada,1",
        prod_id="-//Example, Inc.//Contacts//EN",
        xml='<a>\n<b x="1,2"/></a>',
        client_pid_map="1;urn:uuid:53e374d9-337e-4727-8803-a1e9c14e0556",
        source_url="https://example.com/ada.vcf",
        sound_url="https://example.com/ada.ogg",
        cal_adr_uris=[CalendarUri(uri="mailto:ada@example.com", is_primary=True)],
    )
    ics = generate_single_vcard(contact, id_generator=id_generator)
    lines = ics.split("\r\n")
    assert "UID:ada\\,1" in lines
    assert "PRODID:-//Example\\, Inc.//Contacts//EN" in lines
    assert 'XML:<a>\\n<b x="1\\,2"/></a>' in lines
    assert "CLIENTPIDMAP:1;urn:uuid:53e374d9-337e-4727-8803-a1e9c14e0556" in lines
    assert "SOURCE:https://example.com/ada.vcf" in lines
    assert "SOUND;VALUE=URI:https://example.com/ada.ogg" in lines
    assert "CALADRURI;PREF=1:mailto:ada@example.com" in lines

    result = parse_vcard_file(ics)
    assert not result.errors
    assert len(result.items) == 1
    after = result.items[0]
    assert after.model_dump(exclude={"revision"}) == contact.model_dump(
        exclude={"revision"}
    )


def test_generate_skips_control_characters(id_generator: IdGenerator) -> None:
    """Test a value with a line break is left out instead of adding a property."""
    contact = Contact(
        formatted_name="Test",
        url="https://example.com/\nNOTE:injected",
        timezone="Europe/Berlin\r",
        source_url="https://example.com/\x00",
    )
    ics = generate_single_vcard(contact, id_generator=id_generator)
    assert "URL" not in ics
    assert "TZ" not in ics
    assert "SOURCE" not in ics
    assert "NOTE" not in ics

    result = parse_vcard_file(ics)
    assert not result.errors
    assert result.items[0].note is None
    assert result.items[0].url is None


def test_gender_identity_only(id_generator: IdGenerator) -> None:
    """Test a gender identity is written with an empty sex component."""
    contact = Contact(formatted_name="Test", gender_identity="non-binary")
    ics = generate_single_vcard(contact, id_generator=id_generator)
    assert "GENDER:;non-binary\r\n" in ics

    result = parse_vcard_file(ics)
    assert not result.errors
    assert result.items[0].gender is None
    assert result.items[0].gender_identity == "non-binary"

    result = parse_vcard_file("BEGIN:VCARD\nFN:Test\nGENDER:;\nEND:VCARD\n")
    assert result.errors == [
        "Failed to parse property GENDER in VCARD #1 (\"Test\"): GENDER is empty"
    ]


def test_text_whitespace_kept(id_generator: IdGenerator) -> None:
    """Test surrounding whitespace in free text values is read back."""
    contact = Contact(formatted_name="  Padded  ", note=" indented\n  note ")
    result = parse_vcard_file(generate_single_vcard(contact, id_generator=id_generator))
    assert result.items[0].formatted_name == "  Padded  "
    assert result.items[0].note == " indented\n  note "
