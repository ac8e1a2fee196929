from upgrade_lens.presentation.cli import main

main()
