import datetime
import unittest

from lockwatch.core.errors import ReportError
from lockwatch.core.model import Advisory, AdvisoryId, PackageRef, Report, Vulnerability, VulnerabilityInfo

REPORT = {
    "vulnerabilities": {
        "found": True,
        "count": 1,
        "list": [
            {
                "advisory": {
                    "id": "RUSTSEC-2021-0003",
                    "date": "2021-01-08",
                    "title": "Buffer overflow in SmallVec::insert_many",
                },
                "package": {"name": "smallvec", "version": "1.6.0", "source": "registry"},
                "patched_versions": [">=0.6.14, <1.0.0", ">=1.6.1"],
            }
        ],
    },
    "warnings": [
        {
            "kind": "unmaintained",
            "advisory": {
                "id": "RUSTSEC-2020-0016",
                "date": "2020-05-02",
                "title": "net2 crate has been deprecated",
                "url": "https://github.com/deprecrated/net2-rs/commit/3350e38",
            },
            "package": {"name": "net2", "version": "0.2.37", "source": "registry"},
        }
    ],
}


class TestAdvisoryId(unittest.TestCase):

    def test_canonical_urls(self):
        self.assertEqual(
            AdvisoryId("RUSTSEC-2021-0003").url(),
            "https://rustsec.org/advisories/RUSTSEC-2021-0003.html",
        )
        self.assertEqual(
            AdvisoryId("CVE-2021-25900").url(),
            "https://cve.mitre.org/cgi-bin/cvename.cgi?name=CVE-2021-25900",
        )
        self.assertEqual(
            AdvisoryId("GHSA-43w2-9j62-hq99").url(),
            "https://github.com/advisories/GHSA-43w2-9j62-hq99",
        )

    def test_unknown_ids_have_no_url(self):
        self.assertIsNone(AdvisoryId("RUSTSEC-0000-0000").url())
        self.assertIsNone(AdvisoryId("OTHER-1").url())


class TestReport(unittest.TestCase):

    def test_from_dict(self):
        report = Report.from_dict(REPORT)

        vuln = report.vulnerabilities.list[0]
        self.assertTrue(report.vulnerabilities.found)
        self.assertEqual(vuln.advisory.id, AdvisoryId("RUSTSEC-2021-0003"))
        self.assertEqual(vuln.advisory.date, datetime.date(2021, 1, 8))
        self.assertEqual(vuln.package, PackageRef("smallvec", "1.6.0", "registry"))
        self.assertEqual(report.warnings[0].package.name, "net2")

    def test_to_dict_keeps_structure(self):
        self.assertEqual(Report.from_dict(REPORT).to_dict(), REPORT)

    def test_count_is_not_recomputed(self):
        data = {"vulnerabilities": {"found": True, "count": 7, "list": []}, "warnings": []}

        self.assertEqual(Report.from_dict(data).to_dict()["vulnerabilities"]["count"], 7)

    def test_empty_report(self):
        report = Report.from_dict({})

        self.assertFalse(report.vulnerabilities.found)
        self.assertEqual(report.vulnerabilities.list, [])
        self.assertEqual(report.warnings, [])

    def test_invalid_advisory_date(self):
        data = {"vulnerabilities": {"found": True, "count": 1, "list": [
            {"advisory": {"id": "X", "date": "yesterday", "title": "t"}, "package": {"name": "a", "version": "1"}},
        ]}}

        with self.assertRaises(ReportError):
            Report.from_dict(data)

    def test_missing_package_version(self):
        with self.assertRaises(ReportError):
            PackageRef.from_dict({"name": "a"})

    def test_vulnerability_info_from_list(self):
        advisory = Advisory(AdvisoryId("RUSTSEC-2021-0003"), datetime.date(2021, 1, 8), "t")
        vuln = Vulnerability(advisory, PackageRef("smallvec", "1.6.0"))

        info = VulnerabilityInfo.from_list([vuln])

        self.assertTrue(info.found)
        self.assertEqual(info.count, 1)

    def test_optional_fields_are_not_invented(self):
        data = {
            "vulnerabilities": {"found": False, "count": 0, "list": []},
            "warnings": [
                {
                    "advisory": {"id": "RUSTSEC-2020-0016", "date": "2020-05-02", "title": "net2 is deprecated"},
                    "package": {"name": "net2", "version": "0.2.37"},
                }
            ],
        }

        report = Report.from_dict(data)

        self.assertIsNone(report.warnings[0].kind)
        self.assertEqual(report.to_dict(), data)

    def test_null_lists_read_as_empty(self):
        report = Report.from_dict({"vulnerabilities": {"found": False, "list": None}, "warnings": None})

        self.assertEqual(report.vulnerabilities.list, [])
        self.assertEqual(report.warnings, [])

    def test_non_list_entries_are_rejected(self):
        with self.assertRaises(ReportError):
            Report.from_dict({"vulnerabilities": {"list": "smallvec"}})
        with self.assertRaises(ReportError):
            Report.from_dict({"warnings": 3})
        with self.assertRaises(ReportError):
            Vulnerability.from_dict({
                "advisory": {"id": "X", "date": "2021-01-08", "title": "t"},
                "package": {"name": "a", "version": "1"},
                "patched_versions": ">=1.6.1",
            })
