from evw_newsletter.exec.runner import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
