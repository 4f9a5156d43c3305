"""Property tests for zone file parsing.

Property 4: Zone Record Parsing Correctness
For any zone of ``host IN A address`` lines the parser SHALL produce one host
entry per distinct owner, in first-seen order, holding every record of that
owner.

Property 5: Directive Handling
$TTL, $ORIGIN, $INCLUDE and $GENERATE SHALL update the parser state and be
recorded in the entry sequence where they appear.

Property 6: Fail Fast Errors
The first malformed line SHALL abort the parse with a ParseError naming the
file and line.
"""
import json
import os

import pytest
from hypothesis import given, strategies as st, settings, HealthCheck

from zonetools.models import (
    EntryType,
    GenerateEntry,
    IncludeEntry,
    OriginEntry,
    RecordEntry,
    TTLEntry,
)
from zonetools.services.zone_parser import ParseError, ZoneParser, parse_zone_file


label_strategy = st.text(
    min_size=1,
    max_size=15,
    alphabet='abcdefghijklmnopqrstuvwxyz0123456789'
)

ipv4_strategy = st.ip_addresses(v=4).map(str)


def parse_text(write_zone, text, **kwargs):
    return ZoneParser(write_zone(text), **kwargs).parse()


class TestZoneRecordParsingCorrectness:
    """Property 4: Zone Record Parsing Correctness"""

    def test_example_zone(self, example_zone):
        """The example zone yields metadata and three grouped hosts.

        Feature: zonetools, Property 4: Zone Record Parsing Correctness
        """
        parsed = ZoneParser(example_zone).parse()

        assert parsed.metadata.origin == "example.com."
        assert parsed.metadata.ttl == 3600
        assert [type(e) for e in parsed.entries] == [
            TTLEntry, OriginEntry, RecordEntry, RecordEntry, RecordEntry,
        ]
        assert [h.hostname for h in parsed.entries.hosts()] == [
            "example.com.", "www.example.com.", "mail.example.com.",
        ]

        apex = parsed.entries.find_host("example.com.")
        assert len(apex.records.soa) == 1
        assert apex.records.ns[0].name_server == "ns1.example.com."
        assert str(apex.records.a[0].address) == "192.0.2.1"

        soa = apex.records.soa[0]
        assert soa.primary_ns == "ns1.example.com."
        assert soa.email == "admin.example.com."
        assert (soa.serial, soa.refresh, soa.retry, soa.expire, soa.minimum_ttl) == (
            2024010101, 7200, 3600, 1209600, 86400,
        )

        mail = parsed.entries.find_host("mail.example.com.")
        assert mail.records.mx[0].priority == 10
        assert mail.records.mx[0].mail == "mail.example.com."
        assert str(mail.records.a[0].address) == "192.0.2.20"
        assert mail.records.a[0].ttl == 3600

    @given(records=st.lists(st.tuples(label_strategy, ipv4_strategy), min_size=1, max_size=20))
    @settings(max_examples=50, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_one_host_entry_per_owner(self, write_zone, records):
        """Records of the same owner merge into the first-seen host entry.

        Feature: zonetools, Property 4: Zone Record Parsing Correctness
        """
        lines = ["$ORIGIN example.org."]
        lines.extend(f"{label} IN A {address}" for label, address in records)
        parsed = parse_text(write_zone, "\n".join(lines) + "\n")

        expected_order = []
        for label, _ in records:
            if label not in expected_order:
                expected_order.append(label)

        hosts = parsed.entries.hosts()
        assert [h.hostname for h in hosts] == [f"{label}.example.org." for label in expected_order]
        for label in expected_order:
            host = parsed.entries.find_host(f"{label}.example.org.")
            expected = [address for name, address in records if name == label]
            assert [str(a.address) for a in host.records.a] == expected

    def test_blank_owner_continues_previous_host(self, write_zone):
        """Lines starting with whitespace belong to the previous owner.

        Feature: zonetools, Property 4: Zone Record Parsing Correctness
        """
        parsed = parse_text(write_zone, (
            "$ORIGIN example.com.\n"
            "host IN A 192.0.2.1\n"
            "     IN TXT \"hello\"\n"
            "other IN A 192.0.2.2\n"
            "host IN MX 10 mail\n"
        ))

        assert [h.hostname for h in parsed.entries.hosts()] == [
            "host.example.com.", "other.example.com.",
        ]
        host = parsed.entries.find_host("host.example.com.")
        assert host.records.txt[0].text == "hello"
        assert host.records.mx[0].mail == "mail.example.com."
        assert host.records.count() == 3

    def test_records_before_origin_are_absolute(self, write_zone):
        """Owners read before any $ORIGIN are qualified against the root.

        Feature: zonetools, Property 4: Zone Record Parsing Correctness
        """
        parsed = parse_text(write_zone, (
            "@ IN A 192.0.2.1\n"
            "www IN A 192.0.2.2\n"
            "$ORIGIN example.com.\n"
            "mail IN A 192.0.2.3\n"
        ))

        hostnames = [h.hostname for h in parsed.entries.hosts()]
        assert hostnames == [".", "www.", "mail.example.com."]
        assert all(name.endswith(".") for name in hostnames)

    def test_parentheses_attached_to_data(self, write_zone):
        """Grouping parentheses written against the data are not part of it.

        Feature: zonetools, Property 4: Zone Record Parsing Correctness
        """
        parsed = parse_text(write_zone, (
            "$ORIGIN example.com.\n"
            "m IN MX (10 mail)\n"
            "t IN TXT (\"a\" \"b\")\n"
            "single IN TXT (\"one\")\n"
            "multi IN TXT (\"first\"\n"
            "    \"second\")\n"
        ))
        entries = parsed.entries

        mx = entries.find_host("m.example.com.").records.mx[0]
        assert (mx.priority, mx.mail) == (10, "mail.example.com.")
        assert entries.find_host("t.example.com.").records.txt[0].text == '"a" "b"'
        assert entries.find_host("single.example.com.").records.txt[0].text == "one"
        assert entries.find_host("multi.example.com.").records.txt[0].text == '"first""second"'

    def test_column_one_keyword_continues_previous_host(self, write_zone):
        """An upper case type in column one stands for a blank owner.

        Feature: zonetools, Property 4: Zone Record Parsing Correctness
        """
        parsed = parse_text(write_zone, (
            "$ORIGIN example.com.\n"
            "host IN A 192.0.2.1\n"
            "TXT \"inherited\"\n"
            "IN MX 5 mx1\n"
            "ns IN A 192.0.2.53\n"
        ))

        host = parsed.entries.find_host("host.example.com.")
        assert host.records.txt[0].text == "inherited"
        assert host.records.mx[0].priority == 5
        assert parsed.entries.find_host("ns.example.com.") is not None

    def test_ttl_class_and_case(self, write_zone):
        """Explicit TTL and class are kept; types and classes ignore case.

        Feature: zonetools, Property 4: Zone Record Parsing Correctness
        """
        parsed = parse_text(write_zone, (
            "$ORIGIN example.com.\n"
            "$TTL 300\n"
            "www 600 IN A 192.0.2.1\n"
            "low in a 192.0.2.2\n"
            "version CH TXT \"9.18\"\n"
        ))

        www = parsed.entries.find_host("www.example.com.")
        assert www.records.a[0].ttl == 600
        low = parsed.entries.find_host("low.example.com.")
        assert low.records.a[0].ttl == 300
        assert low.records.a[0].rr_class == "IN"
        version = parsed.entries.find_host("version.example.com.")
        assert version.records.txt[0].rr_class == "CH"

    def test_default_ttl_used_without_ttl_directive(self, write_zone):
        """Records take the configured default TTL until $TTL is seen.

        Feature: zonetools, Property 4: Zone Record Parsing Correctness
        """
        parsed = parse_text(write_zone, "$ORIGIN example.com.\nhost A 192.0.2.1\n", default_ttl=120)

        assert parsed.entries.find_host("host.example.com.").records.a[0].ttl == 120
        assert parsed.metadata.ttl == 120

    def test_inaddr_comment_flag(self, write_zone):
        """``;inaddr`` sets the A record flag, other comments do not.

        Feature: zonetools, Property 4: Zone Record Parsing Correctness
        """
        parsed = parse_text(write_zone, (
            "$ORIGIN example.com.\n"
            "host IN A 10.0.0.1 ;inaddr\n"
            "other IN A 10.0.0.2 ; unrelated comment\n"
            "third IN A 10.0.0.3 ; IN-ADDR\n"
        ))

        assert parsed.entries.find_host("host.example.com.").records.a[0].inaddr is True
        assert parsed.entries.find_host("other.example.com.").records.a[0].inaddr is False
        assert parsed.entries.find_host("third.example.com.").records.a[0].inaddr is True

    def test_multi_line_txt_segments(self, write_zone):
        """Quoted segments on continuation lines are joined without spaces.

        Feature: zonetools, Property 4: Zone Record Parsing Correctness
        """
        parsed = parse_text(write_zone, (
            "$ORIGIN example.com.\n"
            "txt IN TXT (\n"
            "    \"first part \"\n"
            "    \"second part\"\n"
            "    \"third part\" )\n"
            "after IN A 192.0.2.1\n"
        ))

        txt = parsed.entries.find_host("txt.example.com.").records.txt[0]
        assert txt.text == '"first part ""second part""third part"'
        assert parsed.entries.find_host("after.example.com.") is not None

    def test_multi_line_record_keeps_first_line_comment(self, write_zone):
        """The comment on the opening line belongs to the record.

        Feature: zonetools, Property 4: Zone Record Parsing Correctness
        """
        parsed = parse_text(write_zone, (
            "$ORIGIN example.com.\n"
            "gw IN A ( ; inaddr\n"
            "    10.0.0.1 )\n"
        ))

        assert parsed.entries.find_host("gw.example.com.").records.a[0].inaddr is True

    def test_all_record_types(self, write_zone):
        """Each supported type is parsed into its typed fields.

        Feature: zonetools, Property 4: Zone Record Parsing Correctness
        """
        parsed = parse_text(write_zone, (
            "$ORIGIN example.com.\n"
            "v6 IN AAAA 2001:db8::1\n"
            "alias IN CNAME www\n"
            "quoted IN MX \"20 mx2\"\n"
            "1 IN PTR host.example.com.\n"
            "_sip._tcp IN SRV 10 5 5060 sip\n"
            "@ IN CAA 0 issue \"letsencrypt.org\"\n"
            "box IN HINFO \"x86\" \"Linux\"\n"
            "enum IN NAPTR 100 10 \"U\" \"E2U+sip\" \"!^.*$!sip:info@example.com!\" .\n"
            "spf IN SPF \"v=spf1 -all\"\n"
        ))
        entries = parsed.entries

        assert str(entries.find_host("v6.example.com.").records.aaaa[0].address) == "2001:db8::1"
        assert entries.find_host("alias.example.com.").records.cname[0].target == "www.example.com."

        mx = entries.find_host("quoted.example.com.").records.mx[0]
        assert (mx.priority, mx.mail) == (20, "mx2.example.com.")

        assert entries.find_host("1.example.com.").records.ptr[0].pointer == "host.example.com."

        srv = entries.find_host("_sip._tcp.example.com.").records.srv[0]
        assert (srv.priority, srv.weight, srv.port, srv.target) == (10, 5, 5060, "sip.example.com.")

        caa = entries.find_host("example.com.").records.caa[0]
        assert (caa.flags, caa.tag, caa.value) == (0, "issue", "letsencrypt.org")

        hinfo = entries.find_host("box.example.com.").records.hinfo[0]
        assert (hinfo.cpu, hinfo.os) == ("x86", "Linux")

        naptr = entries.find_host("enum.example.com.").records.naptr[0]
        assert (naptr.order, naptr.preference) == (100, 10)
        assert (naptr.flags, naptr.service) == ("U", "E2U+sip")
        assert naptr.regexp == "!^.*$!sip:info@example.com!"
        assert naptr.replacement == "."

        assert entries.find_host("spf.example.com.").records.spf[0].text == "v=spf1 -all"

    def test_repeated_parse_is_identical(self, example_zone):
        """Every parse starts from fresh state.

        Feature: zonetools, Property 4: Zone Record Parsing Correctness
        """
        parser = ZoneParser(example_zone)

        first = parser.parse().to_dict()
        second = parser.parse().to_dict()

        assert first == second
        assert len(second["entries"]) == 5

    def test_json_serializable(self, example_zone):
        """Parsed zones convert to JSON compatible dictionaries.

        Feature: zonetools, Property 4: Zone Record Parsing Correctness
        """
        data = json.loads(json.dumps(parse_zone_file(example_zone).to_dict()))

        assert data["metadata"] == {"origin": "example.com.", "ttl": 3600}
        assert data["entries"][0]["type"] == "ttl"
        assert data["entries"][2]["host"]["records"]["A"][0]["address"] == "192.0.2.1"


class TestDirectiveHandling:
    """Property 5: Directive Handling"""

    @given(ttl=st.integers(min_value=0, max_value=2 ** 32 - 1))
    @settings(max_examples=50, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_ttl_applies_to_following_records(self, write_zone, ttl):
        """$TTL sets the TTL of later records and the zone metadata.

        Feature: zonetools, Property 5: Directive Handling
        """
        parsed = parse_text(write_zone, f"$ORIGIN example.com.\n$TTL {ttl}\nhost A 192.0.2.1\n")

        assert parsed.metadata.ttl == ttl
        assert parsed.entries.find_host("host.example.com.").records.a[0].ttl == ttl
        assert parsed.entries.of_type(EntryType.TTL)[0].value == ttl

    def test_origin_gets_trailing_dot(self, write_zone):
        """$ORIGIN without a trailing dot is made absolute.

        Feature: zonetools, Property 5: Directive Handling
        """
        parsed = parse_text(write_zone, (
            "$ORIGIN example.com\n"
            "a A 192.0.2.1\n"
            "$ORIGIN sub.example.com.\n"
            "b A 192.0.2.2\n"
        ))

        origins = [e.domain for e in parsed.entries if isinstance(e, OriginEntry)]
        assert origins == ["example.com.", "sub.example.com."]
        assert parsed.metadata.origin == "sub.example.com."
        assert parsed.entries.find_host("b.sub.example.com.") is not None

    def test_include_is_parsed_in_place(self, write_zone):
        """Included records appear after the include entry and keep their file.

        Feature: zonetools, Property 5: Directive Handling
        """
        include_path = write_zone("inc IN A 192.0.2.5\n", name="hosts.inc")
        main_path = write_zone(
            "$ORIGIN example.com.\n"
            "$INCLUDE hosts.inc\n"
            "after IN A 192.0.2.9\n"
        )

        parsed = ZoneParser(main_path).parse()

        assert [type(e) for e in parsed.entries] == [
            OriginEntry, IncludeEntry, RecordEntry, RecordEntry,
        ]
        include = parsed.entries[1]
        assert include.filename == include_path
        assert include.source_file == main_path
        assert parsed.entries[2].host.hostname == "inc.example.com."
        assert parsed.entries[2].source_file == include_path
        assert parsed.entries[3].source_file == main_path

    def test_include_state_carries_over(self, write_zone):
        """$TTL and $ORIGIN set in an included file stay in force afterwards.

        Feature: zonetools, Property 5: Directive Handling
        """
        write_zone("$ORIGIN example.net.\n$TTL 42\n", name="settings.inc")
        parsed = parse_text(write_zone, "$INCLUDE settings.inc\nhost A 192.0.2.1\n")

        host = parsed.entries.find_host("host.example.net.")
        assert host.records.a[0].ttl == 42
        assert parsed.metadata.origin == "example.net."

    def test_generate_captured_verbatim(self, write_zone):
        """$GENERATE is captured with its templates, not expanded.

        Feature: zonetools, Property 5: Directive Handling
        """
        parsed = parse_text(write_zone, (
            "$ORIGIN example.com.\n"
            "$TTL 900\n"
            "$GENERATE 1-10 host-$ A 10.0.0.$\n"
            "$GENERATE 10-20/2 dhcp-${0,3,d} 300 IN A 10.0.1.$\n"
            "$GENERATE 1-3 txt-$ TXT \"v=$\"\n"
        ))

        generated = [e.directive for e in parsed.entries if isinstance(e, GenerateEntry)]
        assert len(generated) == 3

        first = generated[0]
        assert (first.range, first.owner_name, first.rr_type, first.rdata) == (
            "1-10", "host-$", "A", "10.0.0.$",
        )
        assert first.ttl == 900
        assert first.origin == "example.com."

        second = generated[1]
        assert second.range == "10-20/2"
        assert second.owner_name == "dhcp-${0,3,d}"
        assert (second.ttl, second.rr_class) == (300, "IN")

        assert generated[2].rdata == "v=$"
        assert parsed.entries.hosts() == []


class TestFailFastErrors:
    """Property 6: Fail Fast Errors"""

    @pytest.mark.parametrize("line,message", [
        ("bad IN A 999.999.999.999", "invalid A record address"),
        ("v4 IN AAAA 192.0.2.1", "AAAA record must be IPv6"),
        ("mapped IN AAAA ::ffff:192.0.2.1", "AAAA record must be IPv6"),
        ("v6 IN A 2001:db8::1", "A record must be IPv4"),
        ("host IN", "invalid or missing record type"),
        ("host IN DNSKEY 257 3 8 abc", "invalid or missing record type"),
        ("mx IN MX mail", "MX record requires"),
        ("srv IN SRV 1 2 70000 target", "SRV port"),
        ("soa IN SOA ns admin 1 2 3", "SOA record requires"),
        ("$TTL abc", "TTL value"),
        ("$FOO bar", "unknown directive"),
        ("$TTL", "incomplete directive"),
        ("$GENERATE 1-10 host-$ A", "invalid $GENERATE format"),
        ("$GENERATE 1-10 host-$ DNAME x", "unsupported $GENERATE record type"),
    ])
    def test_malformed_line_raises(self, write_zone, line, message):
        """A malformed line raises ParseError with file and line number.

        Feature: zonetools, Property 6: Fail Fast Errors
        """
        path = write_zone(f"$ORIGIN example.com.\n{line}\n")

        with pytest.raises(ParseError) as exc_info:
            ZoneParser(path).parse()

        error = exc_info.value
        assert message in str(error)
        assert error.file_path == path
        assert error.line_number == 2
        assert str(error).startswith(f"{path}:2: ")

    def test_missing_file(self, tmp_path):
        """An unreadable zone file raises ParseError.

        Feature: zonetools, Property 6: Fail Fast Errors
        """
        with pytest.raises(ParseError, match="cannot read zone file"):
            ZoneParser(str(tmp_path / "missing.zone")).parse()

    def test_missing_origin(self, write_zone):
        """A zone without $ORIGIN is rejected.

        Feature: zonetools, Property 6: Fail Fast Errors
        """
        with pytest.raises(ParseError, match="no \\$ORIGIN directive found"):
            parse_text(write_zone, "$TTL 300\nhost A 192.0.2.1\n")

    def test_blank_owner_without_previous_host(self, write_zone):
        """A continuation line with nothing to continue is an error.

        Feature: zonetools, Property 6: Fail Fast Errors
        """
        with pytest.raises(ParseError, match="no previous hostname"):
            parse_text(write_zone, "$ORIGIN example.com.\n   IN A 192.0.2.1\n")

    def test_unterminated_parenthesis(self, write_zone):
        """A multi-line record still open at end of file is reported at its start.

        Feature: zonetools, Property 6: Fail Fast Errors
        """
        with pytest.raises(ParseError, match="unterminated parenthesis") as exc_info:
            parse_text(write_zone, "$ORIGIN example.com.\n@ IN SOA ns admin (\n 1 2 3\n")

        assert exc_info.value.line_number == 2

    def test_missing_include(self, write_zone):
        """Errors inside an include are wrapped with the include path.

        Feature: zonetools, Property 6: Fail Fast Errors
        """
        path = write_zone("$ORIGIN example.com.\n$INCLUDE nowhere.inc\n")

        with pytest.raises(ParseError, match="error parsing included file") as exc_info:
            ZoneParser(path).parse()

        assert exc_info.value.line_number == 2
        assert os.path.join(os.path.dirname(path), "nowhere.inc") in str(exc_info.value)

    def test_bad_record_in_include(self, write_zone):
        """The inner error names the included file and its line.

        Feature: zonetools, Property 6: Fail Fast Errors
        """
        inc = write_zone("ok A 192.0.2.1\nbad A 300.1.1.1\n", name="bad.inc")
        path = write_zone("$ORIGIN example.com.\n$INCLUDE bad.inc\n")

        with pytest.raises(ParseError) as exc_info:
            ZoneParser(path).parse()

        assert f"{inc}:2: invalid A record address" in str(exc_info.value)

    def test_recursive_include_is_bounded(self, write_zone):
        """A file including itself stops at the include depth limit.

        Feature: zonetools, Property 6: Fail Fast Errors
        """
        path = write_zone("$ORIGIN example.com.\n$INCLUDE loop.zone\n", name="loop.zone")

        with pytest.raises(ParseError, match="\\$INCLUDE nesting deeper than 4"):
            ZoneParser(path, max_include_depth=4).parse()
