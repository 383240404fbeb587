from legendo_sync.web.app import main

if __name__ == "__main__":
    main()
