import sys

from thela_rental.ui.main_window import main

if __name__ == '__main__':
    sys.exit(main())
