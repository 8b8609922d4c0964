from spendly_auth.api import main

if __name__ == "__main__":
    main()
