"""Management command to reconcile accounts against the transaction log."""

from django.core.management.base import BaseCommand, CommandError

from ledgerman.audit import audit_accounts


class Command(BaseCommand):
    help = "Check balance, lifetime points and tier of every account against its transactions"

    def add_arguments(self, parser):
        parser.add_argument(
            "--user",
            action="append",
            dest="user_ids",
            default=None,
            help="Audit only this user id (repeatable)",
        )
        parser.add_argument(
            "--database",
            default="default",
            help="Database alias to audit",
        )

    def handle(self, *args, **options):
        findings = audit_accounts(user_ids=options["user_ids"], using=options["database"])
        for finding in findings:
            self.stderr.write(str(finding))
        if findings:
            raise CommandError(f"{len(findings)} ledger inconsistencies found.")
        self.stdout.write(self.style.SUCCESS("Ledger consistent."))
