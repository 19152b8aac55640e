from expense_ledger.cli import main

main()
