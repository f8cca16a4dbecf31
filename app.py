# app.py
"""
Point d'entrée de l'application.

Usage:
  python app.py migrate --db cabinet.db
  python app.py params show
  python app.py consultation add --patient 1 --categorie 1 --medecin 1 --date 15/03/2024 --heure 10:00 --prix 150
  python app.py bilan show 3 2024
  python app.py bilan export 3 2024 bilan_2024_03.xlsx
"""

from cabinet.adapters.cli import main

if __name__ == "__main__":
    main()
