class My_Plugin:
    def run(self, arg: str) -> str:
        return f"ran with {arg}"
