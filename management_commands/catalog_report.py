#!/usr/bin/env python3

import click
import sys
import os


sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@click.command()
@click.option('--subjects/--no-subjects', default=True, help='Include the active subject breakdown')
@click.option('--history', 'history_id', default=None, help='Also print the audit trail of this competency id')
def catalog_report(subjects, history_id):
    """Print catalog totals, active subjects and optionally one competency's audit trail."""
    from settings.database import get_session_local
    from api.competency.infra.db.uow import UnitOfWork
    from api.competency.domain.services.catalog_query import CatalogQueryService
    from api.competency.exceptions import CatalogError

    db = get_session_local()()
    try:
        service = CatalogQueryService(UnitOfWork(db))

        stats = service.stats()
        click.echo("📊 CATALOG SUMMARY:")
        click.echo(f"   Total:           {stats.total}")
        click.echo(f"   Draft:           {stats.draft}")
        click.echo(f"   Active:          {stats.active}")
        click.echo(f"   Deprecated:      {stats.deprecated}")
        click.echo(f"   Unique subjects: {stats.unique_subjects}")

        if subjects:
            breakdown = service.subjects()
            click.echo("\n📚 ACTIVE SUBJECTS:")
            if not breakdown:
                click.echo("   (none)")
            for entry in breakdown:
                click.echo(f"   - {entry.subject}: {entry.count}")

        if history_id:
            entries = service.history(history_id)
            click.echo(f"\n🕑 HISTORY for {history_id}:")
            for entry in entries:
                click.echo(f"   {entry.created_at.isoformat()} {entry.action} by {entry.actor_id}")

    except CatalogError as e:
        click.echo(f"❌ Error: {e.message}", err=True)
        sys.exit(1)
    finally:
        db.close()


if __name__ == '__main__':
    catalog_report()
