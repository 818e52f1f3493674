"""Command-line interface for cohort lab grouping."""

from __future__ import annotations

import argparse
import json

from labgroups.domain.db import DEFAULT_DB_URL, get_session, init_database, reset_database, resolve_db_url
from labgroups.domain.repositories import LabGroupRepository, LearningStyleRepository, TraineeRepository
from labgroups.engine.balancer import BalanceResult, GroupAssignment
from labgroups.engine.orchestrator import build_cohort_groups
from labgroups.io.config import load_config
from labgroups.io.export_csv import export_groups_csv
from labgroups.io.import_csv import import_learning_styles_csv, import_preferences_csv, import_trainees_csv
from labgroups.validator import summarize_groups


def _db_url(args: argparse.Namespace) -> str:
    return resolve_db_url(args.db)


def _cmd_init_db(args: argparse.Namespace) -> None:
    """Initialize the database."""
    if args.reset:
        reset_database(_db_url(args))
    else:
        init_database(_db_url(args))
    print(f"[OK] Database initialized: {_db_url(args)}")


def _cmd_import_csv(args: argparse.Namespace) -> None:
    """Import CSV data into database."""
    session = get_session(_db_url(args))
    
    try:
        if args.trainees:
            count = import_trainees_csv(session, args.trainees, cohort_id=args.cohort)
            print(f"[OK] Imported {count} trainees")
        
        if args.learning_styles:
            count = import_learning_styles_csv(session, args.learning_styles)
            print(f"[OK] Imported {count} learning styles")
        
        if args.preferences:
            count = import_preferences_csv(session, args.preferences)
            print(f"[OK] Imported {count} preferences")
        
        session.close()
        print("[OK] CSV import complete")
        
    except Exception as e:
        session.rollback()
        session.close()
        print(f"[ERROR] Import failed: {e}")
        raise


def _cmd_generate(args: argparse.Namespace) -> None:
    """Generate groups for a cohort."""
    cfg = load_config(args.config)
    session = get_session(args.db, cfg)
    
    try:
        result = build_cohort_groups(
            session,
            args.cohort,
            cfg,
            num_groups=args.groups,
            seed=args.seed,
            persist=not args.no_persist,
        )
        
        if args.out and not args.no_persist:
            export_groups_csv(session, args.out, args.cohort)
        
        if args.json:
            print(json.dumps(result.to_dict(), indent=2))
        
        session.close()
        print(f"[OK] Generated {len(result.groups)} groups for cohort {args.cohort}")
        
    except Exception as e:
        session.rollback()
        session.close()
        print(f"[ERROR] Generation failed: {e}")
        raise


def _cmd_export(args: argparse.Namespace) -> None:
    """Export a cohort's stored groups to CSV."""
    session = get_session(_db_url(args))
    
    try:
        count = export_groups_csv(session, args.out, args.cohort)
        session.close()
        print(f"[OK] Exported {count} group members to {args.out}")
        
    except Exception as e:
        session.close()
        print(f"[ERROR] Export failed: {e}")
        raise


def _cmd_move(args: argparse.Namespace) -> None:
    """Move a trainee between stored groups."""
    session = get_session(_db_url(args))
    
    try:
        LabGroupRepository.move_trainee(
            session,
            args.trainee,
            args.from_group,
            args.to_group,
            changed_by=args.changed_by,
            reason=args.reason,
        )
        session.close()
        print(f"[OK] Moved trainee {args.trainee}: {args.from_group} -> {args.to_group}")
        
    except Exception as e:
        session.rollback()
        session.close()
        print(f"[ERROR] Move failed: {e}")
        raise


def _cmd_history(args: argparse.Namespace) -> None:
    """Print group change history, newest first."""
    session = get_session(_db_url(args))
    
    try:
        entries = LabGroupRepository.get_history(session, trainee_id=args.trainee, limit=args.limit)
        if not entries:
            print("[INFO] No group changes recorded")
        for entry in entries:
            source = entry.from_group_id if entry.from_group_id is not None else "unassigned"
            target = entry.to_group_id if entry.to_group_id is not None else "unassigned"
            line = f"{entry.changed_at:%Y-%m-%d %H:%M} {entry.trainee_id}: {source} -> {target} by {entry.changed_by or 'system'}"
            if entry.reason:
                line += f" ({entry.reason})"
            print(line)
        session.close()
        
    except Exception as e:
        session.close()
        print(f"[ERROR] History failed: {e}")
        raise


def _cmd_summarize(args: argparse.Namespace) -> None:
    """Summarize a cohort's stored groups."""
    session = get_session(_db_url(args))
    
    try:
        stored = LabGroupRepository.get_by_cohort(session, args.cohort)
        groups = []
        roster = []
        for group in stored:
            members = LabGroupRepository.get_members(session, group.id)
            groups.append(GroupAssignment(group.group_index, [t.trainee_id for t in members]))
            roster.extend(members)
        styles = LearningStyleRepository.get_for_trainees(session, [t.trainee_id for t in roster])
        result = BalanceResult(groups=groups, warnings=[], stats={})
        print(summarize_groups(result, roster, styles))
        
        unassigned = [
            t for t in TraineeRepository.get_active_by_cohort(session, args.cohort)
            if t.trainee_id not in {m.trainee_id for m in roster}
        ]
        if unassigned:
            print(f"[WARN] {len(unassigned)} active trainees are not in any group")
        session.close()
        
    except Exception as e:
        session.close()
        print(f"[ERROR] Summary failed: {e}")
        raise


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="labgroups",
        description="Balanced lab group generation for training cohorts",
    )
    
    # Global options
    parser.add_argument("--db", help=f"Database URL (default: {DEFAULT_DB_URL})")
    
    sub = parser.add_subparsers(dest="command", required=True)
    
    init = sub.add_parser("init-db", help="Initialize database")
    init.add_argument("--reset", action="store_true", help="Drop and recreate all tables (deletes all data!)")
    init.set_defaults(func=_cmd_init_db)
    
    imp = sub.add_parser("import-csv", help="Import CSV data into database")
    imp.add_argument("--trainees", help="Path to trainees CSV")
    imp.add_argument("--learning-styles", help="Path to learning styles CSV")
    imp.add_argument("--preferences", help="Path to seating preferences CSV")
    imp.add_argument("--cohort", help="Cohort ID to filter/assign trainees (optional)")
    imp.set_defaults(func=_cmd_import_csv)
    
    gen = sub.add_parser("generate", help="Generate groups for a cohort")
    gen.add_argument("--cohort", required=True, help="Cohort ID")
    gen.add_argument("--groups", type=int, help="Number of groups (default from config)")
    gen.add_argument("--seed", type=int, help="Random seed for reproducible groups")
    gen.add_argument("--config", help="Path to config YAML/JSON (optional)")
    gen.add_argument("--out", help="Optional: export stored groups to CSV")
    gen.add_argument("--no-persist", action="store_true", help="Do not store the generated groups")
    gen.add_argument("--json", action="store_true", help="Print groups, warnings and stats as JSON")
    gen.set_defaults(func=_cmd_generate)
    
    exp = sub.add_parser("export", help="Export stored groups to CSV")
    exp.add_argument("--cohort", required=True, help="Cohort ID")
    exp.add_argument("--out", required=True, help="Path to output CSV")
    exp.set_defaults(func=_cmd_export)
    
    mv = sub.add_parser("move", help="Move a trainee between groups")
    mv.add_argument("--trainee", required=True, help="Trainee ID")
    mv.add_argument("--from-group", type=int, help="Expected current group ID (omit to use whatever group holds the trainee)")
    mv.add_argument("--to-group", type=int, help="Target group ID (omit to unassign)")
    mv.add_argument("--changed-by", help="Who is making the change (recorded in history)")
    mv.add_argument("--reason", help="Reason for the move (recorded in history)")
    mv.set_defaults(func=_cmd_move)
    
    hist = sub.add_parser("history", help="Show group change history")
    hist.add_argument("--trainee", help="Only changes for this trainee")
    hist.add_argument("--limit", type=int, help="Show at most this many entries")
    hist.set_defaults(func=_cmd_history)
    
    summ = sub.add_parser("summarize", help="Summarize stored groups for a cohort")
    summ.add_argument("--cohort", required=True, help="Cohort ID")
    summ.set_defaults(func=_cmd_summarize)
    
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
