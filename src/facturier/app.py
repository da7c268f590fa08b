# app.py
"""
Launcher en ligne de commande.
- charge la configuration (.env projet puis utilisateur) et le journal
- construit l'AppContext, restaure et revalide la session
- sous-commandes : login, logout, status, invoices, pdf, export

Usage : python -m facturier.app <commande> [options]
"""

import argparse
import getpass
import sys

from facturier.config import load_settings
from facturier.controllers.invoice_controller import InvoiceController
from facturier.models.errors import FacturierError
from facturier.models.session import SessionValid
from facturier.services.app_context import AppContext
from facturier.utils.formatage import format_date_fr, format_money
from facturier.utils.logger import configure_logging, log_debug, log_erreur, log_info, log_warning


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="facturier", description="Client de facturation multi-établissements")
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser("login", help="Connexion utilisateur")
    login.add_argument("email")
    login.add_argument("--admin", action="store_true", help="Connexion au portail admin")

    sub.add_parser("logout", help="Déconnexion")
    sub.add_parser("status", help="Session et établissement courant")
    sub.add_parser("invoices", help="Liste des factures")

    pdf = sub.add_parser("pdf", help="PDF d'une facture")
    pdf.add_argument("invoice_id")
    pdf.add_argument("--print", dest="do_print", action="store_true", help="Envoyer à l'imprimante")
    pdf.add_argument("--output-dir", default=None)

    export = sub.add_parser("export", help="Export Excel des factures")
    export.add_argument("filename")
    return parser


def _cmd_login(ctx: AppContext, args) -> int:
    password = getpass.getpass("Mot de passe : ")
    try:
        user = ctx.sign_in_admin(args.email, password) if args.admin else ctx.sign_in(args.email, password)
    except FacturierError as e:
        log_erreur(f"Connexion refusée : {e}")
        print(e.message)
        return 1
    print(f"Connecté : {user.email}")
    org = ctx.organizations.current_organization
    if org:
        print(f"Établissement : {org.name}")
    return 0


def _cmd_invoices(controller: InvoiceController) -> int:
    ok, value = controller.list_invoices()
    if not ok:
        print(value)
        return 1
    for inv in value:
        print(f"{inv.invoice_number or '-':<14} {format_date_fr(inv.created_at):<10} {inv.type:<10} "
              f"{(inv.client_name or ''):<30} {format_money(inv.total_ttc)}")
    return 0


def _cmd_pdf(controller: InvoiceController, args) -> int:
    ok, value = controller.load_invoice(args.invoice_id)
    if not ok:
        print(value)
        return 1
    invoice, settings = value
    if args.do_print:
        ok, value = controller.print_pdf(invoice, settings)
    else:
        ok, value = controller.download_pdf(invoice, settings, args.output_dir)
    print(value)
    return 0 if ok else 1


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_file)
    log_info(f"Démarrage facturier ({settings.api_url})")
    log_debug(f"Commande : {args.command}")

    ctx = AppContext(settings)
    if args.command == "login":
        return _cmd_login(ctx, args)

    check = ctx.start()
    if args.command == "logout":
        ctx.teardown()
        print("Déconnecté")
        return 0
    if not isinstance(check, SessionValid):
        log_warning(f"Session invalide ({check.reason}), commande {args.command} refusée")
        print(f"Session invalide : {check.reason}. Utilisez 'login'.")
        return 1

    controller = InvoiceController(ctx)
    if args.command == "status":
        org = ctx.organizations.current_organization
        print(f"Utilisateur : {check.user.email}{' (admin)' if check.user.is_admin else ''}")
        print(f"Établissement : {org.name if org else '-'} (rôle : {ctx.organizations.user_role or '-'})")
        return 0
    if args.command == "invoices":
        return _cmd_invoices(controller)
    if args.command == "pdf":
        return _cmd_pdf(controller, args)
    if args.command == "export":
        ok, value = controller.export_excel(args.filename)
        print(value)
        return 0 if ok else 1
    return 2


if __name__ == "__main__":
    sys.exit(main())
