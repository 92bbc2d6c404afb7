from .types import DispatchReport, RuleSet


GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
RESET = "\033[0m"


class ResultDisplayer:
    def __init__(self, color=True):
        self.color = color


    def colorize(self, status):
        if not self.color:
            return status
        if status in ("OK", "ENABLED"):
            return GREEN + status + RESET
        elif status == "FAIL":
            return RED + status + RESET
        else:
            return YELLOW + status + RESET


    def display_report(self, report: DispatchReport):
        print(f"\n=== Checks for {report.file_path} ===")

        if not report.results:
            print("No checks matched.")
            return

        for res in report.results:
            if res.timed_out:
                status = "TIMEOUT"
            else:
                status = "OK" if res.ok else "FAIL"
            print(f"{res.rule_name}: {self.colorize(status)} "
                  f"(exit={res.exit_code}, {res.duration:.2f}s)")
            print(f"  $ {res.command_executed}")
            if not res.ok:
                for line in (res.stderr or res.stdout).strip().splitlines():
                    print(f"    {line}")

        print(report.summary().splitlines()[0])


    def display_rules(self, rules: RuleSet):
        if rules.source is None:
            print("No rule file found.")
        else:
            print(f"Rules from {rules.source}:")
        if not len(rules):
            print("  (none)")
            return
        for rule in rules:
            state = self.colorize("ENABLED" if rule.enabled else "DISABLED")
            print(f"  {rule.name} [{state}] {', '.join(map(str, rule.patterns))}")
            print(f"    {rule.command}")
