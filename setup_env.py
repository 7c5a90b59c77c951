import os
import secrets

def generate_token_secret() -> str:
    print("Generating token signing secret (64 random bytes)...")
    return secrets.token_urlsafe(64)

def setup_env():
    if os.path.exists(".env"):
        response = input("A .env file already exists. Overwrite it? (y/N): ")
        if response.lower() != 'y':
            print("Aborted.")
            return

    if not os.path.exists(".env.example"):
        print("Error: .env.example not found.")
        return

    print("Reading .env.example...")
    with open(".env.example", "r") as f:
        env_content = f.read()

    token_secret = generate_token_secret()

    # Rotating the secret invalidates every token issued with the old one
    new_lines = []
    for line in env_content.splitlines():
        if line.startswith("TOKEN_SECRET="):
            new_lines.append(f'TOKEN_SECRET="{token_secret}"')
        else:
            new_lines.append(line)

    with open(".env", "w") as f:
        f.write("\n".join(new_lines))
        f.write("\n") # Ensure trailing newline

    print("SUCCESS: .env file created with a new token secret.")

if __name__ == "__main__":
    setup_env()
