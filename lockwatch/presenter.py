"""
Renders an audit report to the terminal or as JSON.

Human output shows, for each finding, its advisory attributes followed by
the inverse dependency tree of the affected package. A package's tree is
shown only the first time the package comes up in a run.
"""

import dataclasses
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Set, Union

from lockwatch.config import OutputConfig, OutputFormat
from lockwatch.core.graph import DependencyTree, EdgeDirection
from lockwatch.core.lockfile import Lockfile
from lockwatch.core.model import Advisory, PackageRef, Report, Vulnerability, Warning
from lockwatch.terminal import StatusPrinter


class Severity(Enum):
    CRITICAL = "red"
    INFORMATIONAL = "yellow"

    @property
    def color(self) -> str:
        return self.value


class TreeDisplay:
    """Draws a package's inverse dependency tree at most once per run."""

    def __init__(self, printer: StatusPrinter, config: OutputConfig, displayed: Set[PackageRef]) -> None:
        self.printer = printer
        self.config = config
        self.displayed = displayed

    def show(self, severity: Severity, package: PackageRef, tree: DependencyTree) -> None:
        if package in self.displayed:
            return

        # Marked as seen even when drawing is suppressed below
        self.displayed.add(package)

        show_tree = self.config.show_tree
        if show_tree is not None and not show_tree:
            return

        self.printer.attr(severity.color, "Dependency tree:", "")
        tree.render(self.printer.stream, tree.node_of(package), EdgeDirection.INCOMING)


class Presenter:
    """
    Vulnerability report presenter.

    One instance serves one presentation run: the set of packages whose
    tree has been displayed lives on the instance and is never shared.
    """

    def __init__(self, config: OutputConfig, printer: Optional[StatusPrinter] = None) -> None:
        self.config = dataclasses.replace(config)
        self.printer = printer or StatusPrinter(color=self.config.color)
        self.displayed_packages: Set[PackageRef] = set()
        self.trees = TreeDisplay(self.printer, self.config, self.displayed_packages)

    def before_scan(self, lockfile_path: Union[str, Path], lockfile: Lockfile) -> None:
        if not self.config.is_quiet():
            self.printer.ok(
                "Scanning",
                f"{lockfile_path} for vulnerabilities ({len(lockfile.packages)} crate dependencies)",
            )

    def present_report(self, report: Report, lockfile: Lockfile) -> None:
        if self.config.format is OutputFormat.JSON:
            json.dump(report.to_dict(), self.printer.stream)
            self.printer.stream.write("\n")
            return

        if report.vulnerabilities.found:
            self.printer.error("Vulnerable crates found!")
        else:
            self.printer.ok("Success", "No vulnerable packages found")

        tree = lockfile.dependency_tree()
        logging.debug(
            f"Presenting {len(report.vulnerabilities.list)} vulnerabilities "
            f"and {len(report.warnings)} warnings."
        )

        for vulnerability in report.vulnerabilities.list:
            self._print_vulnerability(vulnerability, tree)

        if report.warnings:
            self.printer.blank()
            self.printer.warn("found informational advisories for dependencies")

            for warning in report.warnings:
                self._print_warning(warning, tree)

        if report.vulnerabilities.found:
            self.printer.blank()

            if report.vulnerabilities.count == 1:
                self.printer.error("1 vulnerability found!")
            else:
                self.printer.error(f"{report.vulnerabilities.count} vulnerabilities found!")

    def _print_vulnerability(self, vulnerability: Vulnerability, tree: DependencyTree) -> None:
        advisory = vulnerability.advisory
        color = Severity.CRITICAL.color

        self.printer.blank()
        self.printer.attr(color, "ID:      ", str(advisory.id))
        self.printer.attr(color, "Crate:   ", vulnerability.package.name)
        self.printer.attr(color, "Version: ", str(vulnerability.package.version))
        self.printer.attr(color, "Date:    ", advisory.date.isoformat())

        url = self._advisory_url(advisory)
        if url:
            self.printer.attr(color, "URL:     ", url)

        self.printer.attr(color, "Title:   ", advisory.title)
        self.printer.attr(color, "Solution: upgrade to", " OR ".join(vulnerability.patched_versions))

        self.trees.show(Severity.CRITICAL, vulnerability.package, tree)

    def _print_warning(self, warning: Warning, tree: DependencyTree) -> None:
        advisory = warning.advisory
        info, critical = Severity.INFORMATIONAL.color, Severity.CRITICAL.color

        self.printer.blank()
        self.printer.attr(info, "Crate:   ", warning.package.name)
        self.printer.attr(critical, "Title:   ", advisory.title)
        self.printer.attr(critical, "Date:    ", advisory.date.isoformat())

        url = self._advisory_url(advisory)
        if url:
            self.printer.attr(info, "URL:     ", url)

        self.trees.show(Severity.INFORMATIONAL, warning.package, tree)

    @staticmethod
    def _advisory_url(advisory: Advisory) -> Optional[str]:
        # Canonical URL from the identifier wins over the advisory's own field
        return advisory.id.url() or advisory.url
